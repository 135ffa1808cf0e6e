"""
User preference persistence.

Responsibilities:
- Hold the current UserPreferences snapshot for the single local user.
- Record viewed dishes (history) and manage favorites and the blacklist.
- Answer "was this dish shown within the last N days" for repeat avoidance.
"""
