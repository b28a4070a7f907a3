"""Index repair: rebuild graph indexes from serialized graph records."""
