"""Analytics app package.

Stores outcome events (failed deposits, lapsed card captures, lapsed
waitlist offers) for reporting. Recording is best effort: the recorder is
driven by domain events published after commit, and a failed write never
undoes the booking change that caused it.
"""
