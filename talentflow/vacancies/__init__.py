"""Vacancy stage completion, schedule resets and holiday impact links."""
