"""Handling of table-manage requests from the table services."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any

from .model import (
    NUMBER_OF_ATS,
    NUMBER_OF_RTS,
    SUCCESS,
    TBL_ERR_NEVER_LOADED,
    TBL_ID_APPEND,
    TBL_ID_ATP_CTRL,
    TBL_ID_ATS_0,
    TBL_ID_ATS_CMD_0,
    TBL_ID_ATS_INFO,
    TBL_ID_RTP_CTRL,
    TBL_ID_RTS_0,
    TBL_ID_RTS_INFO,
    EventId,
    EventType,
    Message,
    StoredCommandApp,
    TableType,
)


def _as_u32(value: int) -> int:
    return value & 0xFFFFFFFF


def _manage_dump_only(app: StoredCommandApp, handle: Hashable) -> None:
    if app.services.table_manage is not None:
        app.services.table_manage(handle)


def table_manage_cmd(app: StoredCommandApp, message: Message) -> None:
    """Let the table services manage the table named in the request."""
    table_id = int(message.payload.get("parameter", 0))

    if TBL_ID_ATS_0 <= table_id < TBL_ID_ATS_0 + NUMBER_OF_ATS:
        manage_ats_table(app, table_id - TBL_ID_ATS_0)
    elif table_id == TBL_ID_APPEND:
        manage_table(app, TableType.APPEND, -1)
    elif TBL_ID_RTS_0 <= table_id < TBL_ID_RTS_0 + NUMBER_OF_RTS:
        manage_rts_table(app, table_id - TBL_ID_RTS_0)
    elif table_id == TBL_ID_RTS_INFO:
        _manage_dump_only(app, "rts_info")
    elif table_id == TBL_ID_RTP_CTRL:
        _manage_dump_only(app, "rtp_ctrl")
    elif table_id == TBL_ID_ATS_INFO:
        _manage_dump_only(app, "ats_info")
    elif table_id == TBL_ID_ATP_CTRL:
        _manage_dump_only(app, "atp_ctrl")
    elif TBL_ID_ATS_CMD_0 <= table_id < TBL_ID_ATS_CMD_0 + NUMBER_OF_ATS:
        _manage_dump_only(app, ("ats_cmd_status", table_id - TBL_ID_ATS_CMD_0))
    else:
        app.send_event(
            EventId.TABLE_MANAGE_ID_ERR,
            EventType.ERROR,
            f"Table manage command packet error: table ID = {table_id}",
        )


def manage_rts_table(app: StoredCommandApp, array_index: int) -> None:
    """Manage a pending update to one RTS table."""
    if array_index >= NUMBER_OF_RTS:
        app.send_event(
            EventId.TABLE_MANAGE_RTS_INV_INDEX_ERR,
            EventType.ERROR,
            f"RTS table manage error: invalid RTS index {array_index}",
        )
        return
    manage_table(app, TableType.RTS, array_index)


def manage_ats_table(app: StoredCommandApp, array_index: int) -> None:
    """Manage a pending update to one ATS table."""
    if array_index >= NUMBER_OF_ATS:
        app.send_event(
            EventId.TABLE_MANAGE_ATS_INV_INDEX_ERR,
            EventType.ERROR,
            f"ATS table manage error: invalid ATS index {array_index}",
        )
        return
    manage_table(app, TableType.ATS, array_index)


def _current_table(app: StoredCommandApp, table_type: TableType, array_index: int) -> Any:
    if table_type is TableType.ATS:
        return app.ats_tables[array_index]
    if table_type is TableType.RTS:
        return app.rts_tables[array_index]
    return app.append_table


def _store_table(app: StoredCommandApp, table_type: TableType, array_index: int, table: Any) -> None:
    if table_type is TableType.ATS:
        app.ats_tables[array_index] = table
    elif table_type is TableType.RTS:
        app.rts_tables[array_index] = table
    else:
        app.append_table = table


def manage_table(app: StoredCommandApp, table_type: TableType, array_index: int) -> None:
    """Release a table, let the services update it, re-acquire it and load new data."""
    table_type = TableType(table_type)
    if table_type is TableType.APPEND:
        handle: Hashable = (TableType.APPEND, None)
    else:
        handle = (table_type, array_index)
    services = app.services

    if services.table_release is not None:
        services.table_release(handle)
    if services.table_manage is not None:
        services.table_manage(handle)

    if services.table_get_address is not None:
        result, table = services.table_get_address(handle)
    else:
        result, table = SUCCESS, _current_table(app, table_type, array_index)
    # The services hand back no table when acquiring fails.
    _store_table(app, table_type, array_index, table)

    if result > SUCCESS and result == _info_updated():
        if table_type is TableType.ATS:
            if services.load_ats is not None:
                services.load_ats(array_index)
        elif table_type is TableType.RTS:
            if services.load_rts is not None:
                services.load_rts(array_index)
        elif services.update_append is not None:
            services.update_append()
    elif result not in (SUCCESS, TBL_ERR_NEVER_LOADED):
        code = _as_u32(result)
        if table_type is TableType.ATS:
            app.send_event(
                EventId.TABLE_MANAGE_ATS_ERR,
                EventType.ERROR,
                f"ATS table manage process error: ATS = {array_index + 1}, Result = 0x{code:X}",
            )
        elif table_type is TableType.RTS:
            app.send_event(
                EventId.TABLE_MANAGE_RTS_ERR,
                EventType.ERROR,
                f"RTS table manage process error: RTS = {array_index + 1}, Result = 0x{code:X}",
            )
        else:
            app.send_event(
                EventId.TABLE_MANAGE_APPEND_ERR,
                EventType.ERROR,
                f"ATS Append table manage process error: Result = 0x{code:X}",
            )


def _info_updated() -> int:
    from .model import TBL_INFO_UPDATED

    return TBL_INFO_UPDATED