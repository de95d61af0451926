"""State, message and service types for the stored command processor."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

# Sizing of the command stores.
NUMBER_OF_ATS = 2
NUMBER_OF_RTS = 64
MAX_ATS_CMDS = 1000
ATS_BUFF_SIZE32 = 8000
BYTES_IN_WORD = 4
RTS_PER_STATUS_WORD = 16
MAX_CMDS_PER_SEC = 8
ENABLE_GROUP_COMMANDS = True

# ATS numbers as seen from the ground (indices are number - 1).
ATSA = 1
ATSB = 2

# Message identifiers.
CMD_MID = 0x18A9
SEND_HK_MID = 0x18AA
WAKEUP_MID = 0x18AB
HK_TLM_MID = 0x08AA

# Command function codes.
NOOP_CC = 0
RESET_COUNTERS_CC = 1
START_ATS_CC = 2
STOP_ATS_CC = 3
START_RTS_CC = 4
STOP_RTS_CC = 5
DISABLE_RTS_CC = 6
ENABLE_RTS_CC = 7
SWITCH_ATS_CC = 8
JUMP_ATS_CC = 9
CONTINUE_ATS_ON_FAILURE_CC = 10
APPEND_ATS_CC = 11
MANAGE_TABLE_CC = 12
START_RTS_GRP_CC = 13
STOP_RTS_GRP_CC = 14
DISABLE_RTS_GRP_CC = 15
ENABLE_RTS_GRP_CC = 16

# Status codes returned by bus and table services.
SUCCESS = 0
TBL_INFO_UPDATED = 0x4C00000E
TBL_ERR_NEVER_LOADED = -0x33FFFFF1

# Table identifiers carried in table-manage requests.
TBL_ID_ATS_0 = 1
TBL_ID_APPEND = TBL_ID_ATS_0 + NUMBER_OF_ATS
TBL_ID_RTS_0 = TBL_ID_APPEND + 1
TBL_ID_RTS_INFO = TBL_ID_RTS_0 + NUMBER_OF_RTS
TBL_ID_RTP_CTRL = TBL_ID_RTS_INFO + 1
TBL_ID_ATS_INFO = TBL_ID_RTP_CTRL + 1
TBL_ID_ATP_CTRL = TBL_ID_ATS_INFO + 1
TBL_ID_ATS_CMD_0 = TBL_ID_ATP_CTRL + 1

MAJOR_VERSION = 3
MINOR_VERSION = 1
REVISION = 1
MISSION_REV = 0


class TableType(Enum):
    """Kinds of loadable table."""

    ATS = "ats"
    RTS = "rts"
    APPEND = "append"


class Processor(IntEnum):
    """The processor due to run the next stored command."""

    ATP = 0
    RTP = 1
    NONE = 0xFF


class CmdStatus(IntEnum):
    """Status of a sequence or of a single ATS command."""

    EMPTY = 0
    LOADED = 1
    IDLE = 2
    EXECUTED = 3
    SKIPPED = 4
    EXECUTING = 5
    FAILED_CHECKSUM = 6
    FAILED_DISTRIB = 7
    STARTING = 8


class EventType(IntEnum):
    """Severity of an event message."""

    DEBUG = 1
    INFORMATION = 2
    ERROR = 3
    CRITICAL = 4


class EventId(IntEnum):
    """Identifiers of the events this processor reports."""

    RESET_DEB = 1
    NOOP_INF = 2
    MID_ERR = 3
    INVLD_CMD_ERR = 4
    ATS_DIST_ERR = 5
    ATS_CHKSUM_ERR = 6
    ATS_MSMTCH_ERR = 7
    ATS_SKP_ERR = 8
    ATS_ABT_ERR = 9
    RTS_DIST_ERR = 10
    RTS_CHKSUM_ERR = 11
    TABLE_MANAGE_ID_ERR = 12
    TABLE_MANAGE_ATS_INV_INDEX_ERR = 13
    TABLE_MANAGE_RTS_INV_INDEX_ERR = 14
    TABLE_MANAGE_ATS_ERR = 15
    TABLE_MANAGE_RTS_ERR = 16
    TABLE_MANAGE_APPEND_ERR = 17


@dataclass(frozen=True)
class Event:
    """An event message as it was reported."""

    event_id: EventId
    event_type: EventType
    text: str


@dataclass
class Message:
    """A command or telemetry message on the bus."""

    msg_id: int
    function_code: int = 0
    payload: dict[str, Any] = field(default_factory=dict)
    checksum_valid: bool = True


@dataclass
class HousekeepingPayload:
    """Counters and status reported in the housekeeping packet."""

    cmd_ctr: int = 0
    cmd_err_ctr: int = 0
    ats_cmd_ctr: int = 0
    ats_cmd_err_ctr: int = 0
    rts_cmd_ctr: int = 0
    rts_cmd_err_ctr: int = 0
    rts_active_ctr: int = 0
    rts_active_err_ctr: int = 0
    last_ats_err_seq: int = 0
    last_ats_err_cmd: int = 0
    last_rts_err_seq: int = 0
    last_rts_err_cmd: int = 0
    append_cmd_arg: int = 0
    append_entry_count: int = 0
    append_load_count: int = 0
    atp_free_bytes: list[int] = field(default_factory=lambda: [0] * NUMBER_OF_ATS)
    ats_number: int = 0
    atp_state: int = 0
    atp_cmd_number: int = 0
    switch_pend_flag: bool = False
    next_ats_time: int = 0
    num_rts_active: int = 0
    rts_number: int = 0
    next_rts_time: int = 0
    rts_executing_status: list[int] = field(
        default_factory=lambda: [0] * _status_word_count()
    )
    rts_disabled_status: list[int] = field(
        default_factory=lambda: [0] * _status_word_count()
    )
    continue_ats_on_failure_flag: bool = False


def _status_word_count() -> int:
    return -(-NUMBER_OF_RTS // RTS_PER_STATUS_WORD)


@dataclass
class AtsControlBlock:
    """State of the absolute time processor."""

    atp_state: CmdStatus = CmdStatus.EMPTY
    ats_number: int = 0
    cmd_number: int = 0
    time_index_ptr: int = 0
    switch_pend_flag: bool = False


@dataclass
class RtsControlBlock:
    """State of the relative time processor."""

    num_rts_active: int = 0
    rts_number: int = 0


@dataclass
class RtsInfo:
    """Per-RTS status."""

    rts_status: CmdStatus = CmdStatus.EMPTY
    disabled_flag: bool = False
    cmd_ctr: int = 0
    cmd_err_ctr: int = 0
    next_command_time: int = 0
    next_command_ptr: int = 0
    use_ctr: int = 0


@dataclass
class AtsInfo:
    """Per-ATS status."""

    ats_use_ctr: int = 0
    number_of_commands: int = 0
    ats_size: int = 0


@dataclass
class AtsEntry:
    """One command stored in an ATS, tagged with its command number."""

    cmd_number: int
    message: Message
    time_tag: int = 0


@dataclass
class RtsEntry:
    """One command stored in an RTS, tagged with its relative delay."""

    message: Message
    time_tag: int = 0


def _checksum_from_message(message: Message) -> bool:
    return message.checksum_valid


def _switch_refused() -> bool:
    return False


@dataclass
class Services:
    """Connections to the bus, tables and the rest of the application.

    Without a transmit callable, messages are collected in ``sent``. Without a
    verify_length callable, a command is accepted when its payload holds every
    field named for it in ``required_payload``. Hooks that default to None are
    skipped when absent.
    """

    transmit: Callable[[Message, bool], int] | None = None
    validate_checksum: Callable[[Message], bool] = _checksum_from_message
    inline_switch: Callable[[], bool] = _switch_refused
    verify_length: Callable[[Message, str], bool] | None = None
    clock: Callable[[], int] | None = None
    kill_ats: Callable[[], None] | None = None
    get_next_ats_command: Callable[[], None] | None = None
    kill_rts: Callable[[int], None] | None = None
    get_next_rts_command: Callable[[], None] | None = None
    service_switch_pend: Callable[[], None] | None = None
    update_next_time: Callable[[], None] | None = None
    auto_start_rts: Callable[[int], None] | None = None
    load_ats: Callable[[int], None] | None = None
    load_rts: Callable[[int], None] | None = None
    update_append: Callable[[], None] | None = None
    table_release: Callable[[Hashable], None] | None = None
    table_manage: Callable[[Hashable], None] | None = None
    table_get_address: Callable[[Hashable], tuple[int, Any]] | None = None
    command_handlers: dict[int, Callable[[Message], None]] = field(default_factory=dict)
    required_payload: dict[str, tuple[str, ...]] = field(default_factory=dict)
    sent: list[Message] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.transmit is None:
            self.transmit = self._deliver
        if self.verify_length is None:
            self.verify_length = self._payload_complete

    def _deliver(self, message: Message, update_header: bool) -> int:
        self.sent.append(message)
        return SUCCESS

    def _payload_complete(self, message: Message, command: str) -> bool:
        return all(name in message.payload for name in self.required_payload.get(command, ()))


@dataclass
class StoredCommandApp:
    """All state of the stored command processor."""

    services: Services = field(default_factory=Services)
    hk: HousekeepingPayload = field(default_factory=HousekeepingPayload)
    ats_ctrl: AtsControlBlock = field(default_factory=AtsControlBlock)
    rts_ctrl: RtsControlBlock = field(default_factory=RtsControlBlock)
    rts_info: list[RtsInfo] = field(
        default_factory=lambda: [RtsInfo() for _ in range(NUMBER_OF_RTS)]
    )
    ats_info: list[AtsInfo] = field(
        default_factory=lambda: [AtsInfo() for _ in range(NUMBER_OF_ATS)]
    )
    ats_cmd_status: list[list[CmdStatus]] = field(
        default_factory=lambda: [[CmdStatus.EMPTY] * MAX_ATS_CMDS for _ in range(NUMBER_OF_ATS)]
    )
    ats_cmd_index_buffer: list[list[int]] = field(
        default_factory=lambda: [[0] * MAX_ATS_CMDS for _ in range(NUMBER_OF_ATS)]
    )
    ats_tables: list[dict[int, AtsEntry] | None] = field(
        default_factory=lambda: [{} for _ in range(NUMBER_OF_ATS)]
    )
    rts_tables: list[dict[int, RtsEntry] | None] = field(
        default_factory=lambda: [{} for _ in range(NUMBER_OF_RTS)]
    )
    append_table: dict[int, AtsEntry] | None = field(default_factory=dict)
    next_proc_number: Processor = Processor.NONE
    next_cmd_time: dict[Processor, int] = field(
        default_factory=lambda: {Processor.ATP: 0, Processor.RTP: 0}
    )
    current_time: int = 0
    enable_header_update: bool = False
    auto_start_rts: int = 0
    num_cmds_sec: int = 0
    append_word_count: int = 0
    events: list[Event] = field(default_factory=list)
    outbox: list[Message] = field(default_factory=list)

    def send_event(self, event_id: EventId, event_type: EventType, text: str) -> Event:
        """Record an event message and return it."""
        event = Event(EventId(event_id), EventType(event_type), text)
        self.events.append(event)
        return event

    def event_ids(self) -> list[EventId]:
        """Identifiers of all events reported so far, in order."""
        return [event.event_id for event in self.events]

    def current_ats_entry(self) -> AtsEntry | None:
        """The ATS entry the control block points at, if there is one."""
        ats_index = self.ats_ctrl.ats_number - 1
        cmd_index = self.ats_ctrl.cmd_number - 1
        if not (0 <= ats_index < NUMBER_OF_ATS and 0 <= cmd_index < MAX_ATS_CMDS):
            return None
        table = self.ats_tables[ats_index]
        if table is None:
            return None
        return table.get(self.ats_cmd_index_buffer[ats_index][cmd_index])

    def current_rts_entry(self) -> RtsEntry | None:
        """The next entry of the RTS the control block points at, if any."""
        rts_index = self.rts_ctrl.rts_number - 1
        if not 0 <= rts_index < NUMBER_OF_RTS:
            return None
        table = self.rts_tables[rts_index]
        if table is None:
            return None
        return table.get(self.rts_info[rts_index].next_command_ptr)