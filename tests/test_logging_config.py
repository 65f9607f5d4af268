import structlog

from hfvbridge.logging_config import SecretRedactor, bind_wallet_context


def test_redactor_masks_keys_in_string_fields():
    redactor = SecretRedactor(["alchemy-secret", ""])

    event = redactor(
        None,
        "warning",
        {"event": "RPC https://eth-mainnet.g.alchemy.com/v2/alchemy-secret failed", "chain_id": 1},
    )

    assert event == {"event": "RPC https://eth-mainnet.g.alchemy.com/v2/*** failed", "chain_id": 1}


def test_redactor_without_secrets_is_a_no_op():
    event = {"event": "nothing to hide"}

    assert SecretRedactor([])(None, "info", event) is event


def test_wallet_context_binding():
    bind_wallet_context("0xABCDEF0000000000000000000000000000000001", 8453)
    assert structlog.contextvars.get_contextvars() == {
        "wallet": "0xabcdef0000000000000000000000000000000001",
        "chain_id": 8453,
    }

    bind_wallet_context(None, None)
    assert structlog.contextvars.get_contextvars() == {}
