"""telemetry

JSONL trace of a seed search: one record per resolved trial, readable back
for leaderboards, plots and resuming an interrupted run.
"""
