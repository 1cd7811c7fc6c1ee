import logging
from collections.abc import Mapping, MutableMapping
from typing import Optional

from .utils import CONTEXT_VARIABLE_PREFIX


def set_context_variables(
    headers: Mapping[str, str], context: Optional[MutableMapping[str, str]]
) -> None:
    """
    Publish every non-empty `x-v.` response header into the caller's context,
    keyed by the header name without the prefix
    """
    if context is None:
        return

    for name, value in headers.items():
        if not name.lower().startswith(CONTEXT_VARIABLE_PREFIX):
            continue

        variable_name = name[len(CONTEXT_VARIABLE_PREFIX) :]
        if not variable_name or not value:
            continue

        try:
            context[variable_name] = value
        except Exception as e:
            logging.getLogger(__name__).warning(
                f"Unable to set context variable `{variable_name}`: {e}"
            )
            continue

        logging.getLogger(__name__).debug(f"VAR: {variable_name} = {value}")
