"""Adapter layer package for ATS web service integration boundaries."""

from .ats_errors import (
	AtsAdapterError,
	AtsPollTimeoutError,
	AtsRerunStartError,
	AtsRerunTimeoutError,
	AtsRunCancelledError,
	AtsStartError,
	AtsTransportError,
)
from .ats_transport import AtsHttpTransport
from .ats_web_service import AtsWebServiceAdapter
from .ats_wire_codec import (
	AtsOperation,
	codec_build_request,
	codec_extract_field,
	codec_parse_job_handle,
	codec_parse_run_status,
)
from .interfaces import AtsServicePort, AtsTransportPort

__all__ = [
	"AtsAdapterError",
	"AtsHttpTransport",
	"AtsOperation",
	"AtsPollTimeoutError",
	"AtsRerunStartError",
	"AtsRerunTimeoutError",
	"AtsRunCancelledError",
	"AtsServicePort",
	"AtsStartError",
	"AtsTransportError",
	"AtsTransportPort",
	"AtsWebServiceAdapter",
	"codec_build_request",
	"codec_extract_field",
	"codec_parse_job_handle",
	"codec_parse_run_status",
]
