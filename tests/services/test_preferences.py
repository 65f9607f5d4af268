import json

from hfvbridge.services.preferences import PreferenceStore


def test_defaults_without_a_file(tmp_path):
    store = PreferenceStore(tmp_path / "prefs.json")

    assert store.to_dict() == {"source_chain_id": 1, "destination_chain_id": 56}
    assert not (tmp_path / "prefs.json").exists()


def test_set_chains_persists(tmp_path):
    path = tmp_path / "nested" / "prefs.json"
    store = PreferenceStore(path)

    store.set_chains(8453, 42161)

    assert json.loads(path.read_text()) == {"source_chain_id": 8453, "destination_chain_id": 42161}
    assert PreferenceStore(path).to_dict() == {"source_chain_id": 8453, "destination_chain_id": 42161}


def test_partial_update_keeps_other_value(tmp_path):
    store = PreferenceStore(tmp_path / "prefs.json")

    store.set_chains(destination_chain_id=10)

    assert store.source_chain_id == 1
    assert store.destination_chain_id == 10


def test_flip_swaps_chains(tmp_path):
    store = PreferenceStore(tmp_path / "prefs.json")
    store.set_chains(8453, 137)

    store.flip()

    assert store.source_chain_id == 137
    assert store.destination_chain_id == 8453


def test_unchanged_values_are_not_rewritten(tmp_path):
    path = tmp_path / "prefs.json"
    store = PreferenceStore(path)
    store.set("source_chain_id", 10)
    path.write_text(json.dumps({"marker": True}))

    store.set("source_chain_id", 10)

    assert json.loads(path.read_text()) == {"marker": True}


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{not json")

    store = PreferenceStore(path)

    assert store.source_chain_id == 1
    store.set_chains(10, 8453)
    assert json.loads(path.read_text())["source_chain_id"] == 10
