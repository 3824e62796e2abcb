ERRORS = {
  "E_FILE_MISSING": "Container file missing",
  "E_MALFORMED": "Container too short, bad magic or inconsistent header",
  "E_DIVIDE_BY_ZERO": "Container key has zero norm",
  "E_INTEGRITY_MISMATCH": "Checksum does not match recovered plaintext",
}
