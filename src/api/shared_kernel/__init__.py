"""Shared Kernel module.

Relationship-store vocabulary every part of the portal agrees on: the
reference formats, the authorization model snapshot, the store protocol and
its OpenFGA and in-memory implementations. Anything here is depended on by
both the access context and its hosts, so changes need coordinating.
"""
