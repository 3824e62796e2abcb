import sys
from pathlib import Path

from hcx_core.protocol import CHECKSUM_OFFSET, HEADER_LEN

def main():
    if len(sys.argv) not in (2, 3):
        print("Usage: corrupt_one_byte.py <container> [offset]")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())
    if len(b) < HEADER_LEN:
        print("File too small to be a container.")
        raise SystemExit(2)

    # Default: flip the low bit of the stored checksum so decode reports
    # an integrity mismatch while the header still parses.
    idx = int(sys.argv[2]) if len(sys.argv) == 3 else CHECKSUM_OFFSET
    if not 0 <= idx < len(b):
        print(f"Offset {idx} outside file of {len(b)} bytes.")
        raise SystemExit(2)

    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} in {p}")

if __name__ == "__main__":
    main()
