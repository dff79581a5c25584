"""Resolve which reservable actors an authenticated user may act for."""

from __future__ import annotations

from rest_framework.exceptions import PermissionDenied  # type: ignore

from shared.domain.value_objects import ActorRef


def actors_for_user(user) -> set[ActorRef]:
    """The user as a person plus every group they belong to."""
    actors = {user.actor_ref}
    actors.update(group.actor_ref for group in user.member_groups.all())
    return actors


def acting_actor(user, group_id=None) -> ActorRef:
    """The actor a request is made for: the user, or one of their groups."""
    if group_id in (None, ""):
        return user.actor_ref
    group = user.member_groups.filter(pk=group_id).first()
    if group is None:
        raise PermissionDenied("You are not a member of this group.")
    return group.actor_ref
