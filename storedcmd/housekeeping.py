"""Housekeeping telemetry and the no-op and reset-counters commands."""

from __future__ import annotations

from dataclasses import asdict

from .model import (
    ATS_BUFF_SIZE32,
    BYTES_IN_WORD,
    HK_TLM_MID,
    MAJOR_VERSION,
    MINOR_VERSION,
    MISSION_REV,
    NUMBER_OF_RTS,
    REVISION,
    RTS_PER_STATUS_WORD,
    CmdStatus,
    EventId,
    EventType,
    Message,
    Processor,
    StoredCommandApp,
)


def _status_words(app: StoredCommandApp) -> tuple[list[int], list[int]]:
    """Bit masks of executing and disabled sequences, one bit per RTS."""
    count = -(-NUMBER_OF_RTS // RTS_PER_STATUS_WORD)
    executing = [0] * count
    disabled = [0] * count
    for index, info in enumerate(app.rts_info[:NUMBER_OF_RTS]):
        word, bit = divmod(index, RTS_PER_STATUS_WORD)
        if info.disabled_flag:
            disabled[word] |= 1 << bit
        if info.rts_status == CmdStatus.EXECUTING:
            executing[word] |= 1 << bit
    return executing, disabled


def send_hk_packet(app: StoredCommandApp) -> Message:
    """Fill in the housekeeping packet, send it and return the message sent."""
    hk = app.hk
    capacity = ATS_BUFF_SIZE32 * BYTES_IN_WORD
    hk.atp_free_bytes = [capacity - info.ats_size * BYTES_IN_WORD for info in app.ats_info]

    ctrl = app.ats_ctrl
    hk.ats_number = ctrl.ats_number
    hk.atp_state = ctrl.atp_state
    hk.atp_cmd_number = ctrl.cmd_number
    hk.switch_pend_flag = ctrl.switch_pend_flag
    hk.next_ats_time = app.next_cmd_time[Processor.ATP]

    hk.num_rts_active = app.rts_ctrl.num_rts_active
    hk.rts_number = app.rts_ctrl.rts_number
    hk.next_rts_time = app.next_cmd_time[Processor.RTP]

    hk.rts_executing_status, hk.rts_disabled_status = _status_words(app)

    message = Message(HK_TLM_MID, payload=asdict(hk))
    app.services.transmit(message, True)
    app.outbox.append(message)
    return message


def reset_counters_cmd(app: StoredCommandApp, message: Message) -> None:
    """Clear the command and error counters."""
    app.send_event(EventId.RESET_DEB, EventType.DEBUG, "Reset counters command")
    hk = app.hk
    hk.cmd_ctr = 0
    hk.cmd_err_ctr = 0
    hk.ats_cmd_ctr = 0
    hk.ats_cmd_err_ctr = 0
    hk.rts_cmd_ctr = 0
    hk.rts_cmd_err_ctr = 0
    hk.rts_active_ctr = 0
    hk.rts_active_err_ctr = 0


def noop_cmd(app: StoredCommandApp, message: Message) -> None:
    """Count the command and report the version."""
    app.hk.cmd_ctr += 1
    app.send_event(
        EventId.NOOP_INF,
        EventType.INFORMATION,
        f"No-op command. Version {MAJOR_VERSION}.{MINOR_VERSION}.{REVISION}.{MISSION_REV}",
    )