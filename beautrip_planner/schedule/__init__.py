"""
Travel schedule and recovery model.

Modules
-------
model     : Day-level classification: travel, procedure and recovery days.
recommend : Treatments whose recovery fits a trip's length.
"""
