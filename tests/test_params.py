"""
Tests for the parameter registry: sizes, disjointness, trigger semantics.
"""

from __future__ import annotations

import pytest

from backend_sivic.analysis_engine.params import (
    TOTAL_PARAMS_PER_MODE,
    ParameterSet,
    ParameterState,
    ProgramOffChainParam,
    ProgramOnChainParam,
    TokenOffChainParam,
    TokenOnChainParam,
    program_parameter_sets,
    token_parameter_sets,
)


def test_enumeration_sizes():
    """18+13 token params and 19+12 program params; 31 per mode."""
    assert len(TokenOnChainParam) == 18
    assert len(TokenOffChainParam) == 13
    assert len(ProgramOnChainParam) == 19
    assert len(ProgramOffChainParam) == 12
    assert len(TokenOnChainParam) + len(TokenOffChainParam) == TOTAL_PARAMS_PER_MODE
    assert len(ProgramOnChainParam) + len(ProgramOffChainParam) == TOTAL_PARAMS_PER_MODE


def test_on_and_off_chain_names_are_disjoint_within_mode():
    """No name appears in both the on-chain and off-chain set of a mode."""
    assert not {p.value for p in TokenOnChainParam} & {p.value for p in TokenOffChainParam}
    assert not {p.value for p in ProgramOnChainParam} & {p.value for p in ProgramOffChainParam}


def test_fresh_sets_start_unchecked():
    """Every run starts with all parameters unchecked and untriggered."""
    for on_chain, off_chain in (token_parameter_sets(), program_parameter_sets()):
        for params in (on_chain, off_chain):
            counts = params.counts()
            assert counts.checked == 0
            assert counts.triggered == 0
            assert counts.total == len(params)


def test_trigger_implies_checked_and_first_value_wins():
    """trigger() sets checked too; a second trigger keeps the first value."""
    params = ParameterSet(TokenOnChainParam)
    assert params.trigger(TokenOnChainParam.MASSIVE_MINTS, "first") is True
    assert params.trigger(TokenOnChainParam.MASSIVE_MINTS, "second") is False
    state = params[TokenOnChainParam.MASSIVE_MINTS]
    assert state.checked and state.triggered
    assert state.value == "first"


def test_lookup_by_plain_string():
    """Parameters are addressable by their camelCase wire name."""
    params = ParameterSet(ProgramOnChainParam)
    params.check("sandwichAttacks")
    assert params["sandwichAttacks"].checked
    assert "sandwichAttacks" in params
    assert "massiveMints" not in params


def test_placeholder_excluded_from_evaluated():
    """Placeholder parameters count as checked but not as evaluated."""
    on_chain, _ = token_parameter_sets()
    on_chain.check(*TokenOnChainParam)
    counts = on_chain.counts()
    assert counts.checked == 18
    assert 0 < counts.evaluated < 18
    assert on_chain[TokenOnChainParam.GOVERNANCE_EXPLOITS].placeholder
    assert not on_chain[TokenOnChainParam.MASSIVE_MINTS].placeholder


def test_state_dict_omits_absent_value():
    """value and placeholder keys appear only when set."""
    assert ParameterState(checked=True).to_dict() == {"checked": True, "triggered": False}
    state = ParameterState(checked=True, triggered=True, value="50%", placeholder=True)
    assert ParameterState.from_dict(state.to_dict()) == state


def test_from_dict_rejects_unknown_names():
    """Rebuilding from a foreign mode's names raises KeyError."""
    with pytest.raises(KeyError):
        ParameterSet.from_dict(TokenOnChainParam, {"sandwichAttacks": {"checked": True}})
