# -*- coding: utf-8 -*-
"""Tests for the SHA-256 provenance chain."""

import json

from carbontrend.provenance import ProvenanceTracker


class TestProvenanceTracker:
    """Recording, chaining and verification."""

    def test_record_returns_sha256(self):
        tracker = ProvenanceTracker()
        chain_hash = tracker.record("entity", "Q1", "analyze", tracker.build_hash({"a": 1}))
        assert len(chain_hash) == 64
        assert tracker.entry_count == 1
        assert tracker.entity_count == 1

    def test_entries_are_linked(self):
        tracker = ProvenanceTracker()
        first = tracker.record("entity", "Q1", "analyze", "d1")
        tracker.record("entity", "Q2", "analyze", "d2")

        newest = tracker.get_global_chain()[0]
        assert newest["entity_id"] == "Q2"
        assert newest["previous_hash"] == first
        assert tracker.get_global_chain()[1]["previous_hash"] == ProvenanceTracker._GENESIS_HASH

    def test_verify_chain(self):
        tracker = ProvenanceTracker()
        tracker.record("entity", "Q1", "analyze", "d1")
        tracker.record("entity", "Q1", "report", "d2")

        valid, chain = tracker.verify_chain("entity", "Q1")
        assert valid is True
        assert [e["action"] for e in chain] == ["analyze", "report"]

    def test_tampering_is_detected(self):
        tracker = ProvenanceTracker()
        tracker.record("entity", "Q1", "analyze", "d1")
        tracker.get_chain("entity", "Q1")[0]["data_hash"] = "forged"

        valid, _ = tracker.verify_chain("entity", "Q1")
        assert valid is False

    def test_unknown_entity_is_valid_and_empty(self):
        assert ProvenanceTracker().verify_chain("entity", "nope") == (True, [])

    def test_build_hash_ignores_key_order(self):
        tracker = ProvenanceTracker()
        assert tracker.build_hash({"a": 1, "b": 2}) == tracker.build_hash({"b": 2, "a": 1})
        assert tracker.build_hash({"a": 1}) != tracker.build_hash({"a": 2})

    def test_global_chain_limit(self):
        tracker = ProvenanceTracker()
        for i in range(5):
            tracker.record("series", f"s{i}", "analyze", str(i))
        assert [e["entity_id"] for e in tracker.get_global_chain(limit=2)] == ["s4", "s3"]

    def test_export_json(self):
        tracker = ProvenanceTracker()
        tracker.record("series", "s", "analyze", "d")
        exported = json.loads(tracker.export_json())
        assert exported[0]["entity_type"] == "series"
