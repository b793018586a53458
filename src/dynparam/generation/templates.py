from __future__ import annotations

import re
from typing import Mapping, Sequence

from dynparam.generation.model import Region

DEFAULT_BINDING = "[CmdletBinding()]"

FUNCTION_TEMPLATE = """\
function @@NAME@@ {
@@BINDING@@
    param(
        @@STATIC@@
    )

    DynamicParam {
        $RuntimeParameterDictionary = New-Object -TypeName System.Management.Automation.RuntimeDefinedParameterDictionary
@@REGISTRATION@@
        return $RuntimeParameterDictionary
    }

    begin {
@@INITIALIZATION@@
    }

    process {
@@PIPELINE@@
@@DIAGNOSTICS@@
    }
}
"""

_TOKEN_RE = re.compile(r"@@([A-Z]+)@@")


def assemble_function(
    function_name: str,
    regions: Mapping[Region, str],
    binding_attributes: Sequence[str] = (),
) -> str:
    """Substitute the regions into ``FUNCTION_TEMPLATE``.

    Substitution is a single textual pass per line, so region text is never
    rescanned for tokens. A line that held a token and ends up blank is dropped.
    """
    attributes = list(binding_attributes) or [DEFAULT_BINDING]
    values = {
        "NAME": function_name,
        "BINDING": "\n".join(f"    {attribute}" for attribute in attributes),
    }
    for region in Region:
        values[region.name] = regions.get(region, "")

    lines = []
    for line in FUNCTION_TEMPLATE.split("\n"):
        if _TOKEN_RE.search(line) is None:
            lines.append(line)
            continue
        substituted = _TOKEN_RE.sub(lambda match: values[match.group(1)], line)
        if substituted.strip():
            lines.append(substituted)
    return "\n".join(lines)
