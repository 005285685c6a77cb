"""Bet domain services: the offer/accept/cancel ledger, outcome scoring and
the auto-settlement loop.

Everything here works on in-memory Room objects handed over by the room
registry; transport concerns stay in the socket handlers.
"""
