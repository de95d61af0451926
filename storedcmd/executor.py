"""Execution of single stored commands from the ATS and RTS processors."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .model import (
    ATSA,
    CMD_MID,
    NUMBER_OF_ATS,
    NUMBER_OF_RTS,
    MAX_ATS_CMDS,
    SUCCESS,
    SWITCH_ATS_CC,
    AtsEntry,
    CmdStatus,
    EventId,
    EventType,
    Processor,
    StoredCommandApp,
)


def _call(hook: Callable[..., Any] | None, *args: Any) -> None:
    if hook is not None:
        hook(*args)


def _as_u32(value: int) -> int:
    return value & 0xFFFFFFFF


def _entry_checksum_valid(app: StoredCommandApp, entry: AtsEntry | Any) -> bool:
    if app.enable_header_update:
        return True
    return bool(app.services.validate_checksum(entry.message))


def _record_ats_error(app: StoredCommandApp) -> None:
    app.hk.ats_cmd_err_ctr += 1
    app.hk.last_ats_err_seq = app.ats_ctrl.ats_number
    app.hk.last_ats_err_cmd = app.ats_ctrl.cmd_number


def _dispatch_ats_entry(app: StoredCommandApp, entry: AtsEntry, ats_index: int, cmd_index: int) -> bool:
    """Send or execute a valid ATS entry; return True if the ATS must be aborted."""
    statuses = app.ats_cmd_status[ats_index]
    message = entry.message
    app.num_cmds_sec += 1

    if message.function_code == SWITCH_ATS_CC and message.msg_id == CMD_MID:
        # A switch stored inside an ATS is carried out at once rather than sent.
        if app.services.inline_switch():
            statuses[cmd_index] = CmdStatus.EXECUTED
            app.hk.ats_cmd_ctr += 1
        else:
            statuses[cmd_index] = CmdStatus.FAILED_DISTRIB
            _record_ats_error(app)
        return False

    result = app.services.transmit(message, app.enable_header_update)
    if result == SUCCESS:
        statuses[cmd_index] = CmdStatus.EXECUTED
        app.hk.ats_cmd_ctr += 1
        return False

    statuses[cmd_index] = CmdStatus.FAILED_DISTRIB
    _record_ats_error(app)
    app.send_event(
        EventId.ATS_DIST_ERR,
        EventType.ERROR,
        f"ATS Command Distribution Failed, Cmd Number: {entry.cmd_number}, "
        f"SB returned: 0x{_as_u32(result):08X}",
    )
    return True


def process_atp_cmd(app: StoredCommandApp) -> None:
    """Take one due command from the running ATS and execute it."""
    ctrl = app.ats_ctrl
    if not (
        ctrl.atp_state == CmdStatus.EXECUTING
        and app.next_proc_number == Processor.ATP
        and app.next_cmd_time[Processor.ATP] <= app.current_time
    ):
        return

    ats_index = ctrl.ats_number - 1
    cmd_index = ctrl.cmd_number - 1
    if not (0 <= ats_index < NUMBER_OF_ATS and 0 <= cmd_index < MAX_ATS_CMDS):
        return

    statuses = app.ats_cmd_status[ats_index]
    expected_number = cmd_index + 1
    abort = False

    if statuses[cmd_index] == CmdStatus.LOADED:
        entry = app.current_ats_entry()
        received_number = entry.cmd_number if entry is not None else 0
        if entry is not None and received_number == expected_number:
            if _entry_checksum_valid(app, entry):
                abort = _dispatch_ats_entry(app, entry, ats_index, cmd_index)
            else:
                app.send_event(
                    EventId.ATS_CHKSUM_ERR,
                    EventType.ERROR,
                    f"ATS Command Failed Checksum: Command #{received_number} Skipped",
                )
                _record_ats_error(app)
                statuses[cmd_index] = CmdStatus.FAILED_CHECKSUM
                if not app.hk.continue_ats_on_failure_flag:
                    abort = True
        else:
            app.send_event(
                EventId.ATS_MSMTCH_ERR,
                EventType.ERROR,
                "ATS Command Number Mismatch: Command Skipped, "
                f"expected: {expected_number} received: {received_number}",
            )
            _record_ats_error(app)
            statuses[cmd_index] = CmdStatus.SKIPPED
            abort = True
    else:
        # Not aborted: the command may already be executed after a jump back in time.
        app.send_event(
            EventId.ATS_SKP_ERR,
            EventType.ERROR,
            f"Invalid ATS Command Status: Command Skipped, Status: {int(statuses[cmd_index])}",
        )
        _record_ats_error(app)

    if abort:
        letter = "A" if ctrl.ats_number == ATSA else "B"
        app.send_event(EventId.ATS_ABT_ERR, EventType.ERROR, f"ATS {letter} Aborted")
        _call(app.services.kill_ats)
        ctrl.switch_pend_flag = False
    else:
        _call(app.services.get_next_ats_command)


def process_rtp_command(app: StoredCommandApp) -> None:
    """Take the due command from the active RTS and send it."""
    rts_number = app.rts_ctrl.rts_number
    if app.next_proc_number != Processor.RTP:
        return
    if app.next_cmd_time[Processor.RTP] > app.current_time:
        return
    if not 0 < rts_number <= NUMBER_OF_RTS:
        return
    rts_index = rts_number - 1
    info = app.rts_info[rts_index]
    if info.rts_status != CmdStatus.EXECUTING:
        return

    # Counted for the rate limiter even when the command fails.
    app.num_cmds_sec += 1
    cmd_offset = info.next_command_ptr
    entry = app.current_rts_entry()

    checksum_valid = entry is not None and _entry_checksum_valid(app, entry)
    if checksum_valid:
        result = app.services.transmit(entry.message, app.enable_header_update)
        if result == SUCCESS:
            app.hk.rts_cmd_ctr += 1
            info.cmd_ctr += 1
            _call(app.services.get_next_rts_command)
            return
        app.send_event(
            EventId.RTS_DIST_ERR,
            EventType.ERROR,
            f"RTS {rts_number:03d} Command Distribution Failed: RTS Stopped. "
            f"SB returned 0x{_as_u32(result):08X}",
        )
    else:
        app.send_event(
            EventId.RTS_CHKSUM_ERR,
            EventType.ERROR,
            f"RTS {rts_number:03d} Command Failed Checksum: RTS Stopped",
        )

    app.hk.rts_cmd_err_ctr += 1
    info.cmd_err_ctr += 1
    app.hk.last_rts_err_seq = rts_number
    app.hk.last_rts_err_cmd = cmd_offset
    _call(app.services.kill_rts, rts_index)