"""Position ledger tests: open, close, withdraw and transaction atomicity"""
import threading

import pytest

from vault_model.src.constants import DEFAULT_MIN_HEALTH_FACTOR, MAX_HEALTH_FACTOR, WAD, ZERO_ADDRESS
from vault_model.src.errors import (
    ArithmeticOverflowError,
    InsufficientBalance,
    InsufficientCollateral,
    InvalidPrice,
    NoCollateral,
    NoMintAmount,
    NotOwner,
    PositionNotOpen,
    PositionStillOpen,
    PositionUnhealthy,
    TransferFailed,
)
from vault_model.src.events import CollateralWithdrawn, PositionClosed, PositionOpened
from vault_model.src.state.position import Position

ALICE = "0x000000000000000000000000000000000000a11c"
BOB = "0x0000000000000000000000000000000000000b0b"

def test_open_position(vault):
    position_id = vault.open_position(ALICE, 1000, WAD)

    assert position_id == 1
    assert vault.positions(1) == Position(ALICE, WAD, 1000 * WAD, True)
    assert vault.stable.balance_of(ALICE) == 1000 * WAD
    assert vault.stable.total_supply == 1000 * WAD
    assert vault.custody.balance_of(ALICE) == 99 * WAD
    assert vault.custody.total_deposited == WAD
    assert vault.events == [PositionOpened(1, ALICE, WAD, 1000 * WAD)]
    assert vault.health_factor(1) >= DEFAULT_MIN_HEALTH_FACTOR

def test_ids_are_sequential(vault):
    ids = [vault.open_position(who, 100, WAD) for who in (ALICE, BOB, ALICE)]
    assert ids == [1, 2, 3]
    assert vault.next_position_id == 4

def test_open_rejects_empty_requests(vault):
    with pytest.raises(NoCollateral):
        vault.open_position(ALICE, 1000, 0)
    with pytest.raises(NoMintAmount):
        vault.open_position(ALICE, 0, WAD)

def test_open_at_collateral_boundary(vault):
    """Exactly ethNeededForMint opens, one wei less reverts"""
    needed = vault.eth_needed_for_mint(1000)

    with pytest.raises(InsufficientCollateral):
        vault.open_position(ALICE, 1000, needed - 1)

    position_id = vault.open_position(ALICE, 1000, needed)
    assert vault.health_factor(position_id) >= DEFAULT_MIN_HEALTH_FACTOR

def test_failed_open_leaves_no_trace(vault):
    """A revert after validation rolls back every ledger"""
    poor = "0x00000000000000000000000000000000000000dd"
    with pytest.raises(InsufficientBalance):
        vault.open_position(poor, 100, WAD)

    assert vault.next_position_id == 1
    assert vault.stable.total_supply == 0
    assert vault.custody.total_deposited == 0
    assert vault.events == []

@pytest.mark.parametrize("mint, value", [(-1, WAD), (1000, -WAD)])
def test_open_rejects_negative_amounts(vault, mint, value):
    with pytest.raises(ArithmeticOverflowError):
        vault.open_position(ALICE, mint, value)
    assert vault.next_position_id == 1
    assert vault.custody.balance_of(ALICE) == 100 * WAD

def test_open_with_invalid_price(vault, feed):
    feed.set_answer(0)
    with pytest.raises(InvalidPrice):
        vault.open_position(ALICE, 100, WAD)

def test_unknown_position_reads_empty(vault):
    assert vault.positions(42) == Position(ZERO_ADDRESS, 0, 0, False)
    assert vault.health_factor(42) == MAX_HEALTH_FACTOR
    assert not vault.needs_liquidation(42)
    with pytest.raises(PositionNotOpen):
        vault.close_position(ALICE, 42)

def test_close_position(vault):
    position_id = vault.open_position(ALICE, 1000, WAD)
    collateral = vault.positions(position_id).collateral_amount
    balance_before = vault.custody.balance_of(ALICE)

    vault.close_position(ALICE, position_id)

    position = vault.positions(position_id)
    assert not position.open
    assert position.collateral_amount == 0
    assert vault.custody.balance_of(ALICE) == balance_before + collateral
    assert vault.custody.total_deposited == 0
    assert vault.stable.balance_of(ALICE) == 0
    assert vault.stable.total_supply == 0
    assert vault.events[-1] == PositionClosed(position_id, ALICE, WAD, 1000 * WAD)
    assert vault.health_factor(position_id) == MAX_HEALTH_FACTOR

def test_close_checks(vault, feed):
    position_id = vault.open_position(ALICE, 1000, WAD)

    with pytest.raises(NotOwner):
        vault.close_position(BOB, position_id)

    vault.stable.transfer(ALICE, BOB, 1)
    with pytest.raises(InsufficientBalance):
        vault.close_position(ALICE, position_id)
    vault.stable.transfer(BOB, ALICE, 1)

    feed.set_answer(1000 * 10**8)
    with pytest.raises(PositionUnhealthy):
        vault.close_position(ALICE, position_id)

    feed.set_answer(3100 * 10**8)
    vault.close_position(ALICE, position_id)
    with pytest.raises(PositionNotOpen):
        vault.close_position(ALICE, position_id)

def test_close_commits_state_before_transfer(vault):
    """A re-entrant close from the receive hook sees the position already closed"""
    position_id = vault.open_position(ALICE, 1000, WAD)
    observed = []

    def reenter(recipient, amount):
        observed.append((vault.positions(position_id).open, vault.positions(position_id).collateral_amount))
        try:
            vault.close_position(ALICE, position_id)
        except PositionNotOpen:
            observed.append("PositionNotOpen")

    vault.custody.receive_hooks[ALICE] = reenter
    vault.close_position(ALICE, position_id)

    assert observed == [(False, 0), "PositionNotOpen"]
    assert vault.custody.balance_of(ALICE) == 100 * WAD

def test_rejected_transfer_reverts_close(vault):
    position_id = vault.open_position(ALICE, 1000, WAD)

    def reject(recipient, amount):
        raise RuntimeError("receiver reverted")

    vault.custody.receive_hooks[ALICE] = reject
    with pytest.raises(TransferFailed):
        vault.close_position(ALICE, position_id)

    assert vault.positions(position_id) == Position(ALICE, WAD, 1000 * WAD, True)
    assert vault.stable.balance_of(ALICE) == 1000 * WAD
    assert vault.custody.balance_of(ALICE) == 99 * WAD
    assert vault.custody.total_deposited == WAD
    assert not any(isinstance(e, PositionClosed) for e in vault.events)

def test_withdraw_checks(vault):
    position_id = vault.open_position(ALICE, 1000, WAD)
    with pytest.raises(PositionStillOpen):
        vault.withdraw(ALICE, position_id)

    vault.close_position(ALICE, position_id)
    with pytest.raises(NotOwner):
        vault.withdraw(BOB, position_id)

    # Nothing left after a close
    assert vault.withdraw(ALICE, position_id) == 0
    assert vault.events[-1] == CollateralWithdrawn(position_id, ALICE, 0)

def test_reads_wait_for_pending_transaction(vault):
    """Another thread never observes a close that is later rolled back"""
    position_id = vault.open_position(ALICE, 1000, WAD)
    before = vault.positions(position_id)
    in_hook = threading.Event()
    release = threading.Event()
    seen = []

    def stall_then_reject(recipient, amount):
        in_hook.set()
        release.wait(timeout=5)
        raise RuntimeError("receiver reverted")

    errors = []

    def close():
        try:
            vault.close_position(ALICE, position_id)
        except TransferFailed as e:
            errors.append(e)

    vault.custody.receive_hooks[ALICE] = stall_then_reject
    closer = threading.Thread(target=close)
    closer.start()
    assert in_hook.wait(timeout=5)

    reader = threading.Thread(target=lambda: seen.append(vault.positions(position_id)))
    reader.start()
    reader.join(timeout=0.2)
    assert reader.is_alive()

    release.set()
    closer.join(timeout=5)
    reader.join(timeout=5)

    assert len(errors) == 1
    assert seen == [before]
    assert vault.positions(position_id) == before
