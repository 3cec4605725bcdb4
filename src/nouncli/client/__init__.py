"""Transport layer: the production HTTP transport and the error mapper.

Public API:

* :class:`HttpTransport` -- httpx-backed implementation of the transport
  contract.
* :func:`map_transport_error` -- classify whatever a transport raised.
"""

from nouncli.client.errors import map_transport_error
from nouncli.client.transport import HttpTransport, extract_response_data

__all__ = ["HttpTransport", "extract_response_data", "map_transport_error"]
