"""
Shared, app-less helpers (errors + API envelopes) used by every monetization app.
"""
