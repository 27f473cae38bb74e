"""
Test suite for FormGate

Unit tests per module plus API tests through TestClient.
Collaborators are faked; no real HTTP calls are made.
"""
