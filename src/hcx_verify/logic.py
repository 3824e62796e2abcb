from pathlib import Path

from hcx_core.errors import DivideByZeroError, IntegrityMismatchError, MalformedContainerError
from hcx_core.quaternion import is_unit
from hcx_pack.container import decode, read_header

from .const import ERRORS


def _fail(errors: list) -> dict:
    return {"status": "FAIL", "error_count": len(errors), "errors": errors}


def verify_bytes(blob: bytes) -> dict:
    errors = []
    try:
        header = read_header(blob)
    except MalformedContainerError as e:
        errors.append({"code": "E_MALFORMED", "message": ERRORS["E_MALFORMED"], "detail": str(e)})
        return _fail(errors)

    try:
        decode(blob, header.key)
    except DivideByZeroError as e:
        errors.append({"code": "E_DIVIDE_BY_ZERO", "message": ERRORS["E_DIVIDE_BY_ZERO"], "detail": str(e)})
        return _fail(errors)
    except IntegrityMismatchError as e:
        errors.append({
            "code": "E_INTEGRITY_MISMATCH",
            "message": ERRORS["E_INTEGRITY_MISMATCH"],
            "expected": f"{e.expected:08x}",
            "computed": f"{e.computed:08x}",
            "length": e.length,
        })
        return _fail(errors)

    return {
        "status": "PASS",
        "error_count": 0,
        "errors": [],
        "length": header.length,
        "checksum": f"{header.checksum:08x}",
        "key_is_unit": is_unit(header.key),
    }


def verify_container(path: Path) -> dict:
    if not path.is_file():
        return _fail([{"code": "E_FILE_MISSING", "message": ERRORS["E_FILE_MISSING"], "path": str(path)}])
    return verify_bytes(path.read_bytes())
