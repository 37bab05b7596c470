"""Core infrastructure (logging) shared by nipals_pls modules."""
