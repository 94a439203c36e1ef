"""
Type tags and decoded value classes for RSZ fields.

Each value class knows how to parse itself from a FieldReadContext (see
rsz_field_codec). Fixed-layout classes also expose FMT and raw_components()
so the encoder can write them back without a per-class branch.
"""

from enum import IntEnum, auto

from rszkit.rsz.rsz_errors import UnrecognizedTypeTag
from rszkit.utils.hex_util import guid_le_to_str


class TypeTag(IntEnum):
    UKN_ERROR = 0
    UKN_TYPE = auto()
    NOT_INIT = auto()
    CLASS_NOT_FOUND = auto()
    OUT_OF_RANGE = auto()
    UNDEFINED = auto()
    OBJECT = auto()
    ACTION = auto()
    STRUCT = auto()
    NATIVE_OBJECT = auto()
    RESOURCE = auto()
    USER_DATA = auto()
    BOOL = auto()
    C8 = auto()
    C16 = auto()
    S8 = auto()
    U8 = auto()
    S16 = auto()
    U16 = auto()
    S32 = auto()
    U32 = auto()
    S64 = auto()
    U64 = auto()
    F32 = auto()
    F64 = auto()
    STRING = auto()
    MB_STRING = auto()
    ENUM = auto()
    UINT2 = auto()
    UINT3 = auto()
    UINT4 = auto()
    INT2 = auto()
    INT3 = auto()
    INT4 = auto()
    FLOAT2 = auto()
    FLOAT3 = auto()
    FLOAT4 = auto()
    FLOAT3X3 = auto()
    FLOAT3X4 = auto()
    FLOAT4X3 = auto()
    FLOAT4X4 = auto()
    HALF2 = auto()
    HALF4 = auto()
    MAT3 = auto()
    MAT4 = auto()
    VEC2 = auto()
    VEC3 = auto()
    VEC4 = auto()
    VEC_U4 = auto()
    QUATERNION = auto()
    GUID = auto()
    COLOR = auto()
    DATE_TIME = auto()
    AABB = auto()
    CAPSULE = auto()
    TAPERED_CAPSULE = auto()
    CONE = auto()
    LINE = auto()
    LINE_SEGMENT = auto()
    OBB = auto()
    PLANE = auto()
    PLANE_XZ = auto()
    POINT = auto()
    RANGE = auto()
    RANGE_I = auto()
    RAY = auto()
    RAY_Y = auto()
    SEGMENT = auto()
    SIZE = auto()
    SPHERE = auto()
    TRIANGLE = auto()
    CYLINDER = auto()
    ELLIPSOID = auto()
    AREA = auto()
    TORUS = auto()
    RECT = auto()
    RECT3D = auto()
    FRUSTUM = auto()
    KEY_FRAME = auto()
    URI = auto()
    GAME_OBJECT_REF = auto()
    RUNTIME_TYPE = auto()
    SFIX = auto()
    SFIX2 = auto()
    SFIX3 = auto()
    SFIX4 = auto()
    POSITION = auto()
    F16 = auto()
    END = auto()
    DATA = auto()

    @classmethod
    def from_name(cls, name: str) -> "TypeTag":
        """Resolve a schema type string such as "Vec3" or "GameObjectRef"."""
        tag = _TAG_BY_NAME.get(str(name).lower())
        if tag is None:
            raise UnrecognizedTypeTag(name)
        return tag

    @property
    def schema_name(self) -> str:
        return self.name.replace("_", "").lower()


# Internal status codes never appear as field types in a schema
_TAG_BY_NAME = {
    tag.schema_name: tag for tag in TypeTag
    if tag not in (TypeTag.UKN_ERROR, TypeTag.UKN_TYPE, TypeTag.NOT_INIT,
                   TypeTag.CLASS_NOT_FOUND, TypeTag.OUT_OF_RANGE)
}
_TAG_BY_NAME.update({
    "int": TypeTag.S32,
    "uint": TypeTag.U32,
    "float": TypeTag.F32,
    "double": TypeTag.F64,
})


class ArrayData:
    """Array container that stores values and element type"""
    def __init__(self, values=None, element_class=None, orig_type=""):
        self.values = values if values is not None else []
        self.element_class = element_class
        self.orig_type = orig_type

    def add_element(self, element):
        if self.element_class and not isinstance(element, self.element_class):
            raise TypeError(f"Expected {self.element_class.__name__}, got {type(element).__name__}")
        if isinstance(element, ArrayData):
            raise TypeError("Arrays cannot be nested")

        self.values.append(element)
        return len(self.values) - 1

    def __len__(self):
        return len(self.values)


class ScalarData:
    FMT = "<i"

    def __init__(self, value=0, orig_type: str = ""):
        self.value = value
        self.orig_type = orig_type

    @classmethod
    def parse(cls, ctx):
        return cls(ctx.read_struct(cls.FMT), ctx.original_type)

    def raw_components(self):
        return (self.value,)


class BoolData(ScalarData):
    FMT = "<?"

    def __init__(self, value: bool = False, orig_type: str = ""):
        super().__init__(value, orig_type)

    @classmethod
    def parse(cls, ctx):
        raw = ctx.read_bytes(1)
        return cls(raw[0] != 0, ctx.original_type)

    def raw_components(self):
        return (bool(self.value),)


class S8Data(ScalarData):
    FMT = "<b"


class U8Data(ScalarData):
    FMT = "<B"


class C8Data(ScalarData):
    FMT = "<B"


class S16Data(ScalarData):
    FMT = "<h"


class U16Data(ScalarData):
    FMT = "<H"


class C16Data(ScalarData):
    FMT = "<H"


class S32Data(ScalarData):
    FMT = "<i"


class U32Data(ScalarData):
    FMT = "<I"


class S64Data(ScalarData):
    FMT = "<q"


class U64Data(ScalarData):
    FMT = "<Q"


class F16Data(ScalarData):
    FMT = "<e"


class F32Data(ScalarData):
    FMT = "<f"


class F64Data(ScalarData):
    FMT = "<d"


class EnumData(ScalarData):
    """Enums are stored as their signed 32-bit underlying value"""
    FMT = "<i"


class DateTimeData(ScalarData):
    FMT = "<q"


class ObjectData(ScalarData):
    """Index of another instance in the same block"""
    FMT = "<I"


class SfixData(ScalarData):
    """16.16 fixed point"""
    FMT = "<i"

    @classmethod
    def parse(cls, ctx):
        return cls(ctx.read_struct(cls.FMT) / 65536.0, ctx.original_type)

    def raw_components(self):
        return (int(round(self.value * 65536.0)),)


class VectorData:
    FMT = "<2f"
    AXES = ("x", "y")

    def __init__(self, *values, orig_type: str = ""):
        padded = tuple(values) + (0,) * (len(self.AXES) - len(values))
        for axis, value in zip(self.AXES, padded):
            setattr(self, axis, value)
        self.orig_type = orig_type

    @classmethod
    def parse(cls, ctx):
        return cls(*ctx.read_struct(cls.FMT), orig_type=ctx.original_type)

    def components(self):
        return tuple(getattr(self, axis) for axis in self.AXES)

    def raw_components(self):
        return self.components()


class Int2Data(VectorData):
    FMT = "<2i"


class Int3Data(VectorData):
    FMT = "<3i"
    AXES = ("x", "y", "z")


class Int4Data(VectorData):
    FMT = "<4i"
    AXES = ("x", "y", "z", "w")


class Uint2Data(VectorData):
    FMT = "<2I"


class Uint3Data(VectorData):
    FMT = "<3I"
    AXES = ("x", "y", "z")


class Uint4Data(VectorData):
    FMT = "<4I"
    AXES = ("x", "y", "z", "w")


class Float2Data(VectorData):
    FMT = "<2f"


class Float3Data(VectorData):
    FMT = "<3f"
    AXES = ("x", "y", "z")


class Float4Data(VectorData):
    FMT = "<4f"
    AXES = ("x", "y", "z", "w")


class Vec2Data(Float2Data):
    pass


class Vec3Data(Float3Data):
    pass


class Vec4Data(Float4Data):
    pass


class VecU4Data(Uint4Data):
    pass


class QuaternionData(Float4Data):
    pass


class Half2Data(VectorData):
    FMT = "<2e"


class Half4Data(VectorData):
    FMT = "<4e"
    AXES = ("x", "y", "z", "w")


class PlaneXZData(VectorData):
    FMT = "<2f"
    AXES = ("x", "z")


class PlaneData(VectorData):
    FMT = "<4f"
    AXES = ("x", "y", "z", "dist")


class PointData(Float2Data):
    pass


class SizeData(VectorData):
    FMT = "<2f"
    AXES = ("w", "h")


class RangeData(VectorData):
    FMT = "<2f"
    AXES = ("min", "max")


class RangeIData(VectorData):
    FMT = "<2i"
    AXES = ("min", "max")


class ColorData(VectorData):
    FMT = "<4B"
    AXES = ("r", "g", "b", "a")


class PositionData(VectorData):
    FMT = "<3d"
    AXES = ("x", "y", "z")


class _SfixVectorData(VectorData):

    @classmethod
    def parse(cls, ctx):
        raw = ctx.read_struct(cls.FMT)
        return cls(*(v / 65536.0 for v in raw), orig_type=ctx.original_type)

    def raw_components(self):
        return tuple(int(round(v * 65536.0)) for v in self.components())


class Sfix2Data(_SfixVectorData):
    FMT = "<2i"


class Sfix3Data(_SfixVectorData):
    FMT = "<3i"
    AXES = ("x", "y", "z")


class Sfix4Data(_SfixVectorData):
    FMT = "<4i"
    AXES = ("x", "y", "z", "w")


class FloatArrayData:
    """Matrices and geometric shapes kept as a flat run of floats"""
    def __init__(self, values=(), orig_type: str = ""):
        self.values = [float(v) for v in values]
        self.orig_type = orig_type

    @property
    def FMT(self):
        return f"<{len(self.values)}f"

    @classmethod
    def parse(cls, ctx):
        count = max(ctx.field_size // 4, 1)
        values = ctx.read_struct(f"<{count}f")
        if not isinstance(values, tuple):
            values = (values,)
        return cls(values, ctx.original_type)

    def raw_components(self):
        return tuple(self.values)


class GuidData:
    def __init__(self, guid_str: str = None, raw_bytes: bytes = None, orig_type: str = ""):
        if not raw_bytes:
            raw_bytes = b'\0' * 16
        if not guid_str:
            guid_str = guid_le_to_str(raw_bytes)

        self.guid_str = guid_str
        self.raw_bytes = raw_bytes
        self.orig_type = orig_type

    @classmethod
    def parse(cls, ctx):
        raw_bytes = ctx.read_bytes(16)
        return cls(guid_le_to_str(raw_bytes), raw_bytes, ctx.original_type)


class UriData(GuidData):
    pass


class GameObjectRefData(GuidData):
    pass


class StringData:
    def __init__(self, value: str = "", orig_type: str = ""):
        self.value = value
        self.orig_type = orig_type

    @classmethod
    def parse(cls, ctx):
        return cls(ctx.read_string_utf16(), ctx.original_type)


class ResourceData(StringData):
    pass


class RuntimeTypeData(StringData):

    @classmethod
    def parse(cls, ctx):
        return cls(ctx.read_string_utf8(), ctx.original_type)


class UserDataData:
    """Reference to an out-of-line userdata entry, by instance id"""
    def __init__(self, value: int = 0, string: str = "", type_id: int = 0, orig_type: str = ""):
        self.value = value
        self.string = string
        self.type_id = type_id
        self.orig_type = orig_type

    @classmethod
    def parse(cls, ctx):
        instance_id = ctx.read_struct("<I")
        info = ctx.userdata_by_id.get(instance_id)
        if info is None:
            return cls(instance_id, "", 0, ctx.original_type)
        return cls(instance_id, info.string, info.type_id, ctx.original_type)

    def raw_components(self):
        return (self.value,)


class RawBytesData:
    """Stores raw bytes exactly as read from file"""
    def __init__(self, raw_bytes: bytes = bytes(0), field_size: int = 1, orig_type: str = ""):
        self.raw_bytes = raw_bytes
        self.field_size = field_size
        self.orig_type = orig_type

    @classmethod
    def parse(cls, ctx):
        raw = ctx.read_bytes(ctx.field_size)
        return cls(raw, ctx.field_size, ctx.original_type)


# Types whose length comes from the stream rather than the schema
VARIABLE_LENGTH_TYPES = (StringData, RuntimeTypeData)

_FLOAT_ARRAY_TAGS = (
    TypeTag.FLOAT3X3, TypeTag.FLOAT3X4, TypeTag.FLOAT4X3, TypeTag.FLOAT4X4,
    TypeTag.MAT3, TypeTag.MAT4, TypeTag.AABB, TypeTag.CAPSULE,
    TypeTag.TAPERED_CAPSULE, TypeTag.CONE, TypeTag.LINE, TypeTag.LINE_SEGMENT,
    TypeTag.OBB, TypeTag.RAY, TypeTag.RAY_Y, TypeTag.SEGMENT, TypeTag.SPHERE,
    TypeTag.TRIANGLE, TypeTag.CYLINDER, TypeTag.ELLIPSOID, TypeTag.AREA,
    TypeTag.TORUS, TypeTag.RECT, TypeTag.RECT3D, TypeTag.FRUSTUM,
)

TYPE_MAPPING = {
    TypeTag.BOOL: BoolData,
    TypeTag.C8: C8Data,
    TypeTag.C16: C16Data,
    TypeTag.S8: S8Data,
    TypeTag.U8: U8Data,
    TypeTag.S16: S16Data,
    TypeTag.U16: U16Data,
    TypeTag.S32: S32Data,
    TypeTag.U32: U32Data,
    TypeTag.S64: S64Data,
    TypeTag.U64: U64Data,
    TypeTag.F16: F16Data,
    TypeTag.F32: F32Data,
    TypeTag.F64: F64Data,
    TypeTag.ENUM: EnumData,
    TypeTag.DATE_TIME: DateTimeData,
    TypeTag.OBJECT: ObjectData,
    TypeTag.USER_DATA: UserDataData,
    TypeTag.STRING: StringData,
    TypeTag.RESOURCE: ResourceData,
    TypeTag.RUNTIME_TYPE: RuntimeTypeData,
    TypeTag.GUID: GuidData,
    TypeTag.URI: UriData,
    TypeTag.GAME_OBJECT_REF: GameObjectRefData,
    TypeTag.UINT2: Uint2Data,
    TypeTag.UINT3: Uint3Data,
    TypeTag.UINT4: Uint4Data,
    TypeTag.INT2: Int2Data,
    TypeTag.INT3: Int3Data,
    TypeTag.INT4: Int4Data,
    TypeTag.FLOAT2: Float2Data,
    TypeTag.FLOAT3: Float3Data,
    TypeTag.FLOAT4: Float4Data,
    TypeTag.VEC2: Vec2Data,
    TypeTag.VEC3: Vec3Data,
    TypeTag.VEC4: Vec4Data,
    TypeTag.VEC_U4: VecU4Data,
    TypeTag.QUATERNION: QuaternionData,
    TypeTag.HALF2: Half2Data,
    TypeTag.HALF4: Half4Data,
    TypeTag.COLOR: ColorData,
    TypeTag.PLANE: PlaneData,
    TypeTag.PLANE_XZ: PlaneXZData,
    TypeTag.POINT: PointData,
    TypeTag.SIZE: SizeData,
    TypeTag.RANGE: RangeData,
    TypeTag.RANGE_I: RangeIData,
    TypeTag.POSITION: PositionData,
    TypeTag.SFIX: SfixData,
    TypeTag.SFIX2: Sfix2Data,
    TypeTag.SFIX3: Sfix3Data,
    TypeTag.SFIX4: Sfix4Data,
}
TYPE_MAPPING.update({tag: FloatArrayData for tag in _FLOAT_ARRAY_TAGS})


def get_type_class(type_tag: TypeTag) -> type:
    """Value class for a tag; everything unmodelled is kept as raw bytes."""
    return TYPE_MAPPING.get(type_tag, RawBytesData)
