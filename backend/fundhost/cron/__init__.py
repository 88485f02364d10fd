"""Scheduled jobs — run as `python -m fundhost.cron.<job>`."""
