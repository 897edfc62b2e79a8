"""QR rendering for issued code tokens."""
import base64
import io
import json

import qrcode


def render_data_url(token: str) -> str:
    """PNG QR of ``{"t": token}`` as a data URL, the form the student app scans."""
    img = qrcode.make(json.dumps({"t": token}, separators=(",", ":")))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("utf-8")
