"""Binary codec for sample packs loaded onto the looper device."""

from .bytebuf import ByteBuilder, ByteCursor  # noqa: F401
from .decoder import (  # noqa: F401
    decode_loop,
    decode_pack,
    read_loop_at,
    read_offset_table,
)
from .encoder import (  # noqa: F401
    check_layout,
    encode_loop,
    encode_pack,
    pack_note_byte,
    pack_state_velocity,
)
from .errors import (  # noqa: F401
    BufferUnderflowError,
    CapacityExceededError,
    FieldRangeError,
    LayoutError,
    SamplePackError,
)
from .model import (  # noqa: F401
    EMPTY_SLOT,
    LOOPS_PER_PAGE,
    NUM_PAGES,
    TICKS_PER_BEAT,
    EmptySlot,
    LoopData,
    NoteEvent,
    NoteEventTime,
    Page,
    SamplePack,
    is_empty_slot,
    iter_slots,
)
from .size import (  # noqa: F401
    FIXED_PREFIX_SIZE,
    encoded_size,
    fits_capacity,
    loop_byte_size,
    pack_byte_size,
    page_byte_size,
)
from .regions import Difference, describe_offset, first_difference  # noqa: F401
