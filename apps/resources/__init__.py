"""Resources app package.

The catalog of bookable things: resource pools (coworking desks, the
laboratory, the auditorium, the meeting room) and the physical units
that belong to each pool. Reservations always bind to a single unit.
"""
