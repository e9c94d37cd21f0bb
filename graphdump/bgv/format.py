"""Tags and constants of the BGV binary graph format."""

MAGIC = b"BIGV"
SUPPORTED_VERSIONS = frozenset({(7, 0), (7, 1), (8, 0), (8, 1)})

# Top-level tokens
BEGIN_GROUP = 0x00
BEGIN_GRAPH = 0x01
CLOSE_GROUP = 0x02

# Pool object tags
POOL_NEW = 0x00
POOL_STRING = 0x01
POOL_ENUM = 0x02
POOL_CLASS = 0x03
POOL_METHOD = 0x04
POOL_NULL = 0x05
POOL_NODE_CLASS = 0x06
POOL_FIELD = 0x07
POOL_SIGNATURE = 0x08
POOL_NODE_SOURCE_POSITION = 0x09
POOL_NODE = 0x0A

POOL_REFERENCE_TAGS = frozenset(
    {
        POOL_STRING,
        POOL_ENUM,
        POOL_CLASS,
        POOL_METHOD,
        POOL_NODE_CLASS,
        POOL_FIELD,
        POOL_SIGNATURE,
        POOL_NODE_SOURCE_POSITION,
        POOL_NODE,
    }
)

# Class kinds inside a POOL_CLASS payload
KLASS = 0x00
ENUM_KLASS = 0x01

# Property value tags
PROPERTY_POOL = 0x00
PROPERTY_INT = 0x01
PROPERTY_LONG = 0x02
PROPERTY_DOUBLE = 0x03
PROPERTY_FLOAT = 0x04
PROPERTY_TRUE = 0x05
PROPERTY_FALSE = 0x06
PROPERTY_ARRAY = 0x07
PROPERTY_SUBGRAPH = 0x08

NULL_NODE_ID = -1
