"""
Unit tests for pre-flight workflow validation
"""

from workflow_validator import validate_workflow


def wf(*blocks, name="Test"):
    return {"id": "wf_1", "name": name, "blocks": list(blocks)}


def test_valid_workflow():
    result = validate_workflow(wf(
        {"id": "b1", "type": "walletBalance", "config": {"walletAddress": "0xabc", "chain": "Sui"}},
        {"id": "b2", "type": "conditional",
         "config": {"condition": "Less Than", "value": "10", "field": "previous.balance.native.formatted"}},
    ))
    assert result == {"isValid": True, "errors": []}


def test_token_type_is_not_required_structurally():
    result = validate_workflow(wf(
        {"id": "b1", "type": "walletBalance", "config": {"walletAddress": "0xabc", "chain": "Sui"}},
    ))
    assert result["isValid"] is True


def test_non_object_workflow():
    assert validate_workflow(None) == {"isValid": False, "errors": ["Workflow must be an object"]}


def test_name_and_blocks_required():
    result = validate_workflow({"name": " ", "blocks": []})
    assert result["isValid"] is False
    assert result["errors"] == ["Workflow name is required", "Workflow must have at least one block"]


def test_unknown_type_and_missing_config():
    result = validate_workflow(wf(
        {"id": "b1", "type": "teleport", "config": {}},
        {"id": "b2", "type": "walletBalance"},
    ))
    assert result["errors"] == [
        "Block 1: Unknown block type: teleport",
        "Block 2: Block configuration is missing",
    ]


def test_missing_required_fields_are_all_listed():
    result = validate_workflow(wf({"id": "b1", "type": "swap", "config": {"chain": "Sui"}}))
    assert result["errors"] == [
        "Block 1: Amount is required",
        "Block 1: From token is required",
        "Block 1: To token is required",
    ]


def test_duplicate_and_missing_ids():
    result = validate_workflow(wf(
        {"id": "b1", "type": "cronjob", "config": {}},
        {"id": "b1", "type": "cronjob", "config": {}},
        {"type": "cronjob", "config": {}},
        "not a block",
    ))
    assert result["errors"] == [
        "Block 2: Duplicate block id b1",
        "Block 3: Block id is required",
        "Block 4: Block must be an object",
    ]


def test_conditional_checks():
    missing = validate_workflow(wf({"id": "c", "type": "conditional", "config": {"condition": "Greater Than"}}))
    assert missing["errors"] == ["Block 1: Condition, value, and field are required"]

    unsupported = validate_workflow(wf({"id": "c", "type": "conditional",
                                        "config": {"condition": "Between", "value": 1, "field": "x.y"}}))
    assert unsupported["errors"] == ["Block 1: Unsupported condition: Between"]


def test_amount_must_be_positive():
    result = validate_workflow(wf({"id": "s", "type": "stake", "config": {"chain": "Sui", "amount": "-3"}}))
    assert result["errors"] == ["Block 1: Amount must be a positive number"]


def test_type_specific_rules():
    result = validate_workflow(wf(
        {"id": "t", "type": "tokenInfo", "config": {"inputType": "Coin Symbol", "coin": "DOGE"}},
        {"id": "c", "type": "cronjob", "config": {"interval": 2}},
        {"id": "i", "type": "balancesByAddress", "config": {"address": "0xabc", "networkId": "solana"}},
        {"id": "e", "type": "sendEmail", "config": {"to": "a@b.c", "subject": "s"}},
    ))
    assert result["errors"] == [
        "Block 1: Unsupported coin: DOGE",
        "Block 2: Interval must be at least 5 seconds",
        'Block 3: Unsupported network_id "solana" for Token API',
        "Block 4: Body is required",
    ]


def test_validation_does_not_call_providers(engine, capabilities, sui_provider):
    engine.validate_workflow(wf({"id": "b1", "type": "walletBalance",
                                 "config": {"walletAddress": "0xabc", "chain": "Sui"}}))
    sui_provider.get_balance.assert_not_called()
