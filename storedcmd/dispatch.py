"""Routing of bus messages and ground commands to their handlers."""

from __future__ import annotations

from collections.abc import Callable

from .executor import process_atp_cmd, process_rtp_command
from .housekeeping import noop_cmd, reset_counters_cmd, send_hk_packet
from .model import (
    APPEND_ATS_CC,
    CMD_MID,
    CONTINUE_ATS_ON_FAILURE_CC,
    DISABLE_RTS_CC,
    DISABLE_RTS_GRP_CC,
    ENABLE_GROUP_COMMANDS,
    ENABLE_RTS_CC,
    ENABLE_RTS_GRP_CC,
    JUMP_ATS_CC,
    MANAGE_TABLE_CC,
    MAX_CMDS_PER_SEC,
    NOOP_CC,
    RESET_COUNTERS_CC,
    SEND_HK_MID,
    START_ATS_CC,
    START_RTS_CC,
    START_RTS_GRP_CC,
    STOP_ATS_CC,
    STOP_RTS_CC,
    STOP_RTS_GRP_CC,
    SWITCH_ATS_CC,
    WAKEUP_MID,
    CmdStatus,
    EventId,
    EventType,
    Message,
    Processor,
    StoredCommandApp,
)
from .tables import table_manage_cmd

# Expected command layout for each function code, as passed to the length check.
_COMMAND_LAYOUTS: dict[int, str] = {
    NOOP_CC: "NoArgsCmd",
    RESET_COUNTERS_CC: "NoArgsCmd",
    START_ATS_CC: "StartAtsCmd",
    STOP_ATS_CC: "NoArgsCmd",
    START_RTS_CC: "RtsCmd",
    STOP_RTS_CC: "RtsCmd",
    DISABLE_RTS_CC: "RtsCmd",
    ENABLE_RTS_CC: "RtsCmd",
    SWITCH_ATS_CC: "NoArgsCmd",
    JUMP_ATS_CC: "JumpAtsCmd",
    CONTINUE_ATS_ON_FAILURE_CC: "SetContinueAtsOnFailureCmd",
    APPEND_ATS_CC: "AppendAtsCmd",
    MANAGE_TABLE_CC: "NoArgsCmd",
}

if ENABLE_GROUP_COMMANDS:
    _COMMAND_LAYOUTS.update(
        {
            START_RTS_GRP_CC: "RtsGrpCmd",
            STOP_RTS_GRP_CC: "RtsGrpCmd",
            DISABLE_RTS_GRP_CC: "RtsGrpCmd",
            ENABLE_RTS_GRP_CC: "RtsGrpCmd",
        }
    )

_LOCAL_HANDLERS: dict[int, Callable[[StoredCommandApp, Message], None]] = {
    NOOP_CC: noop_cmd,
    RESET_COUNTERS_CC: reset_counters_cmd,
    MANAGE_TABLE_CC: table_manage_cmd,
}


def _refresh_time(app: StoredCommandApp) -> None:
    if app.services.clock is not None:
        app.current_time = app.services.clock()


def _handle_housekeeping_request(app: StoredCommandApp, message: Message) -> None:
    if not app.services.verify_length(message, "NoArgsCmd"):
        return
    if app.auto_start_rts != 0:
        info = app.rts_info[app.auto_start_rts - 1]
        # Only a loaded sequence is enabled before it is started.
        if info.rts_status == CmdStatus.LOADED:
            info.disabled_flag = False
        if app.services.auto_start_rts is not None:
            app.services.auto_start_rts(app.auto_start_rts)
        app.auto_start_rts = 0
    send_hk_packet(app)


def _handle_wakeup(app: StoredCommandApp) -> None:
    services = app.services
    while True:
        if app.ats_ctrl.switch_pend_flag and services.service_switch_pend is not None:
            services.service_switch_pend()

        if app.next_proc_number == Processor.ATP:
            process_atp_cmd(app)
        elif app.next_proc_number == Processor.RTP:
            process_rtp_command(app)

        if services.update_next_time is not None:
            services.update_next_time()

        proc = app.next_proc_number
        if proc == Processor.NONE or app.next_cmd_time[Processor(proc)] > app.current_time:
            app.num_cmds_sec = 0
            return
        if app.num_cmds_sec >= MAX_CMDS_PER_SEC:
            app.num_cmds_sec = 0
            return


def process_request(app: StoredCommandApp, message: Message) -> None:
    """Route a message from the command pipe by its message identifier."""
    _refresh_time(app)

    if message.msg_id == CMD_MID:
        process_command(app, message)
    elif message.msg_id == SEND_HK_MID:
        _handle_housekeeping_request(app, message)
    elif message.msg_id == WAKEUP_MID:
        _handle_wakeup(app)
    else:
        app.send_event(
            EventId.MID_ERR,
            EventType.ERROR,
            f"Invalid command pipe message ID: 0x{message.msg_id & 0xFFFFFFFF:08X}",
        )
        app.hk.cmd_err_ctr += 1


def process_command(app: StoredCommandApp, message: Message) -> None:
    """Route a ground or stored command by its function code."""
    code = message.function_code
    layout = _COMMAND_LAYOUTS.get(code)

    if layout is None:
        app.send_event(
            EventId.INVLD_CMD_ERR,
            EventType.ERROR,
            f"Invalid Command Code: MID =  0x{message.msg_id & 0xFFFFFFFF:08X} CC =  {code}",
        )
        app.hk.cmd_err_ctr += 1
        return

    if not app.services.verify_length(message, layout):
        if code == START_RTS_CC:
            app.hk.rts_active_err_ctr += 1
        return

    local = _LOCAL_HANDLERS.get(code)
    if local is not None:
        local(app, message)
        return

    handler = app.services.command_handlers.get(code)
    if handler is not None:
        handler(message)