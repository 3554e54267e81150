"""Test suite for the realtime proxy.

Unit tests live under unit/, one folder per domain; shared test doubles are
in the helpers/ subpackage.
"""
