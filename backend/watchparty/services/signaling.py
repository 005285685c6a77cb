"""Peer-to-peer signaling rules.

The server never looks inside negotiation payloads; it only decides who
talks to whom and which side of each pair makes the offer.
"""
from typing import Dict, List

from watchparty.models import Room


def is_initiator(name: str, peer: str) -> bool:
    """Of two peers, the lexicographically smaller name initiates."""
    return name < peer


def mark_ready(room: Room, name: str) -> List[Dict]:
    """Add name to the readiness set and list the peers already waiting.

    Returns one entry per already-ready peer with the initiator flag from
    name's point of view. An empty list is also returned when the room
    does not allow media or name is not a participant; callers tell the
    two apart with can_signal().
    """
    if not can_signal(room, name):
        return []
    peers = sorted(room.ready - {name})
    room.ready.add(name)
    return [{'name': peer, 'initiator': is_initiator(name, peer)} for peer in peers]


def can_signal(room: Room, name: str) -> bool:
    participant = room.participants.get(name)
    return room.media_allowed and participant is not None and participant.online


def relay_target(room: Room, sender: str, recipient: str):
    """Live connection handle for recipient, or None when the payload must be dropped."""
    if not can_signal(room, sender) or sender == recipient:
        return None
    participant = room.participants.get(recipient)
    if participant is None:
        return None
    return participant.sid
