"""Fixed-layout records of the character asset (fchar) format."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Union

from rszkit.rsz.rsz_block import RszBlock


class DataId(IntEnum):
    AttackDataParams = 0
    ChargeParamSub = 1
    CommandParamSub = 2
    CommandGroup = 3
    StrikeData = 4
    ProjectileData = 15
    TriggerGroup = 16
    Trigger = 17
    StrikeBox = 20
    ProjectileBox = 21
    ThrowBox = 22
    ProximityBox = 23
    ReflectBox = 24
    PushBox = 25
    UniqueBox = 26
    ThrowHurtBox = 30
    HurtBox = 31
    OtherBox = 32
    GimmickBox = 33
    CameraBox = 34
    PartsBox = 35
    MissionData = 50
    AttackDataKarma = 70
    AssistComboRecipeData = 75
    VoiceFacialData = 80
    VoiceFacialDataEN = 81
    CommonOffset = 100
    AttackOwnerCurve = 101
    AttackTargetCurve = 102
    ScreenVibration = 103
    CameraData = 104
    AttackDataCommon = 105
    RectCommon = 106

    @classmethod
    def coerce(cls, value: int) -> Union["DataId", int]:
        """Known ids become DataId members; unknown ones stay plain ints."""
        try:
            return cls(value)
        except ValueError:
            return value


@dataclass
class FcharHeader:
    version: int = 0
    magic: int = 0
    id_table_offset: int = 0
    parent_id_table_offset: int = 0
    action_list_table_offset: int = 0
    data_id_table_offset: int = 0
    data_list_table_offset: int = 0
    string_object_offset: int = 0
    string_offset: int = 0
    object_table_rsz_offset: int = 0
    object_table_rsz_end: int = 0
    object_count: int = 0
    style_count: int = 0
    data_count: int = 0
    string_count: int = 0

    SIZE = 96
    FMT = "<2I9Q4I"


@dataclass
class ActionListTable:
    action_list_table_offset: int = 0
    style_data_offsets: List[int] = field(default_factory=list)
    action_list_offset: int = 0
    action_rsz: int = 0
    data_id_table_offset: int = 0
    action_list_count: int = 0
    object_count: int = 0


@dataclass
class StyleData:
    data_start_offset: int = 0
    rsz_offset: int = 0
    data_end_offset: int = 0
    rsz: RszBlock = None


@dataclass
class ActionData:
    action_id: int = 0
    frames: int = 0
    key_start_frame: int = 0
    key_end_frame: int = 0


@dataclass
class KeyData:
    key_start_frame: int = 0
    key_end_frame: int = 0


@dataclass
class ObjectData:
    data_count: int = 0
    reserved: int = 0
    key_data: List[KeyData] = field(default_factory=list)


@dataclass
class ActionListInfo:
    action_offset: int = 0
    data_start_offset: int = 0
    rsz_offset: int = 0
    rsz_end: int = 0
    action_count: int = 0
    object_count: int = 0
    action_data: ActionData = field(default_factory=ActionData)


@dataclass
class ObjectInfo:
    object_offset: int = 0
    data_start_offset: int = 0
    rsz_offset: int = 0
    rsz_end: int = 0
    object_data: ObjectData = field(default_factory=ObjectData)


@dataclass
class FcharObject:
    info: ObjectInfo
    action: RszBlock


@dataclass
class ActionList:
    info: ActionListInfo
    action: RszBlock
    objects: List[FcharObject] = field(default_factory=list)


@dataclass
class DataListInfo:
    data_start_offset: int = 0
    rsz_offset: int = 0
    data_end_offset: int = 0
    data_count: int = 0


@dataclass
class DataListItem:
    data_list_offset: int
    info: DataListInfo
    data_ids: List[int]
    data_rsz: RszBlock
