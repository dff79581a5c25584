"""Check-ins app package.

Physical presence at the facility: members check in (optionally against
an approved reservation) and check out again. An actor has at most one
open check-in at any time.
"""
