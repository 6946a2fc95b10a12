"""
# Assetstruct: object formats of the asset archives.

Each object of an archive is stored as a header and a body, two blobs whose
layout is described declaratively by subclasses of Chunk composed from fields.

Two basic main operations are defined for the formats and their sub components:

 1. unpack(): reading the binary data and build a high-level representation
    of it, the interchange document, a JSON-compatible value meant to be edited
    by humans.
    The fields are contiguous, all little endian: each one starts where the
    previous ended; some fields are present or not depending on the number of
    bytes remaining, nothing in the data tags them.

 2. pack(): encode the interchange document into binary data.

Along both operations the objects report the 32-bit identifiers of the objects
they refer to, split between hard links and soft links, so that the caller
can build the graph of dependencies of the whole archive.
"""
