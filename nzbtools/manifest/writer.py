"""NZB XML rendering."""

from xml.sax.saxutils import escape

from nzbtools.models.nzb import Nzb

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
DOCTYPE = '<!DOCTYPE nzb PUBLIC "-//newzBin//DTD NZB 1.1//EN" "http://www.newzbin.com/DTD/nzb/nzb-1.1.dtd">'
NAMESPACE = "http://www.newzbin.com/DTD/2003/nzb"

_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def render_nzb(nzb: Nzb) -> str:
    """Render an Nzb as an NZB 1.1 document."""
    out = [
        XML_DECLARATION,
        DOCTYPE,
        f'<nzb xmlns="{NAMESPACE}">',
        "  <head>",
    ]
    for meta in nzb.meta:
        out.append(f'    <meta type="{_attr(meta.type)}">{escape(meta.value)}</meta>')
    out.append("  </head>")

    for f in nzb.files:
        out.append(
            f'  <file poster="{_attr(f.poster)}" date="{_attr(f.date)}" subject="{_attr(f.subject)}">'
        )
        out.append("    <groups>")
        out.extend(f"      <group>{escape(g)}</group>" for g in f.groups)
        out.append("    </groups>")
        out.append("    <segments>")
        out.extend(
            f'      <segment bytes="{s.size}" number="{s.number}">{escape(s.message_id)}</segment>'
            for s in f.segments
        )
        out.append("    </segments>")
        out.append("  </file>")

    out.append("</nzb>")
    return "\n".join(out) + "\n"


def _attr(value: str) -> str:
    return escape(value, _ATTR_ENTITIES)
