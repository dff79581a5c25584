"""Users app package.

Defines the facility's custom user model (email login, member/admin
roles) and member groups. Users and groups are the reservable actors
of the reservation engine. Use ``apps.users.models.CustomUser`` as the
AUTH_USER_MODEL throughout the project.
"""
