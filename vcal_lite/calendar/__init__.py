"""Calendar text grammar and component parsers for vcal_lite."""
