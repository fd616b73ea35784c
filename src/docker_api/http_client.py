"""
HTTP modem for the Docker daemon
Dials request descriptors over a Unix socket or TCP using http.client
"""

import asyncio
import base64
import http.client
import json
import logging
import os
import socket
import ssl
from typing import Any, Dict, Optional
from urllib.parse import quote, urlparse

from .call import Call
from .config import ClientConfig
from .exceptions import create_api_error
from .stream import Stream

logger = logging.getLogger(__name__)


class UnixHTTPConnection(http.client.HTTPConnection):
    """HTTP connection over Unix socket"""

    def __init__(self, socket_path: str, timeout: int = 60):
        super().__init__('localhost', timeout=timeout)
        self.socket_path = socket_path

    def connect(self):
        """Connect to Unix socket"""
        self.sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self.sock.settimeout(self.timeout)
        self.sock.connect(self.socket_path)


def encode_query(params: Optional[Dict[str, Any]]) -> str:
    """
    Encode query parameters the way the Engine API expects them

    Booleans become 'true'/'false', dicts are sent as JSON, lists repeat
    the key once per item and None values are dropped.
    """
    if not params:
        return ''

    query_parts = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            query_parts.extend(f"{key}={quote(str(item), safe='')}" for item in value)
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        elif isinstance(value, dict):
            value = json.dumps(value)
        query_parts.append(f"{key}={quote(str(value), safe='')}")
    return '&'.join(query_parts)


def encode_auth(auth: Dict[str, Any]) -> str:
    """Base64url JSON used by the X-Registry-Auth and X-Registry-Config headers"""
    return base64.urlsafe_b64encode(json.dumps(auth).encode('utf-8')).decode('ascii')


class DockerHTTPClient:
    """
    Modem for the Docker daemon

    ``dial`` performs one HTTP exchange per call in a worker thread and
    resolves with the parsed body, the response headers (HEAD) or a live
    :class:`Stream`.
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        """
        Initialize Docker HTTP client

        Args:
            config: Client configuration (default: from environment)

        Raises:
            FileNotFoundError: If a Unix socket address does not exist
            ValueError: If the address scheme is not supported
        """
        self.config = config or ClientConfig.from_env()
        self.timeout = self.config.timeout

        url = urlparse(self.config.base_url)
        self.scheme = url.scheme or 'unix'
        self.socket_path = None
        self.host = None
        self.port = None

        if self.scheme in ('unix', 'http+unix'):
            # Remove unix:// prefix if present
            self.socket_path = self.config.base_url.split('://', 1)[-1]
            if not os.path.exists(self.socket_path):
                raise FileNotFoundError(f"Docker socket not found: {self.socket_path}")
        elif self.scheme in ('tcp', 'http', 'https'):
            self.host = url.hostname or 'localhost'
            default_port = 2376 if self.config.uses_tls else 2375
            self.port = url.port or default_port
        else:
            raise ValueError(f"Unsupported Docker host: {self.config.base_url}")

        self.prefix = f"/v{self.config.api_version}" if self.config.api_version else ''

    def __repr__(self):
        return f"<DockerHTTPClient: {self.config.base_url}>"

    def _ssl_context(self) -> ssl.SSLContext:
        cert_path = self.config.cert_path
        ca_file = os.path.join(cert_path, 'ca.pem') if cert_path else None
        context = ssl.create_default_context(cafile=ca_file)
        if cert_path:
            context.load_cert_chain(
                os.path.join(cert_path, 'cert.pem'),
                os.path.join(cert_path, 'key.pem'),
            )
        if not self.config.tls_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> http.client.HTTPConnection:
        if self.socket_path:
            return UnixHTTPConnection(self.socket_path, timeout=self.timeout)
        if self.config.uses_tls:
            return http.client.HTTPSConnection(
                self.host, self.port, timeout=self.timeout, context=self._ssl_context()
            )
        return http.client.HTTPConnection(self.host, self.port, timeout=self.timeout)

    def build_url(self, call: Call) -> str:
        """Versioned path plus encoded query string"""
        url = f"{self.prefix}{call.path}"
        query = encode_query(call.params)
        if query:
            url = f"{url}?{query}"
        return url

    def build_headers(self, call: Call) -> Dict[str, str]:
        headers = {'Host': 'localhost' if self.socket_path else f"{self.host}:{self.port}"}
        if call.authconfig is not None:
            headers['X-Registry-Auth'] = encode_auth(call.authconfig)
        if call.registryconfig:
            headers['X-Registry-Config'] = encode_auth(call.registryconfig)
        if call.hijack or call.open_stdin:
            headers['Connection'] = 'Upgrade'
            headers['Upgrade'] = 'tcp'
        return headers

    def build_body(self, call: Call, headers: Dict[str, str]) -> Any:
        if call.file is not None:
            # Tar archive, either raw bytes or a binary file object
            headers['Content-Type'] = 'application/x-tar'
            if isinstance(call.file, (bytes, bytearray)):
                headers['Content-Length'] = str(len(call.file))
            return call.file

        if call.data is None:
            return None

        if isinstance(call.data, (bytes, bytearray)):
            headers['Content-Length'] = str(len(call.data))
            return call.data

        body = json.dumps(call.data).encode('utf-8')
        headers['Content-Type'] = 'application/json'
        headers['Content-Length'] = str(len(body))
        return body

    async def dial(self, call: Call) -> Any:
        """
        Perform a call against the daemon

        Args:
            call: Request descriptor

        Returns:
            Parsed JSON, text, None for an empty body, a header dict for
            HEAD requests, or a Stream for streamed/hijacked calls

        Raises:
            APIError: If the status code is not a success in call.status_codes
        """
        return await asyncio.to_thread(self.request, call)

    def request(self, call: Call) -> Any:
        """Blocking counterpart of dial"""
        url = self.build_url(call)
        headers = self.build_headers(call)
        body = self.build_body(call, headers)

        logger.debug(f"{call.method} {url}")

        conn = self._connect()
        if call.no_timeout:
            conn.timeout = None
        keep_open = False
        try:
            conn.request(call.method, url, body=body, headers=headers)
            # getresponse() may drop conn.sock when the server closes the connection
            sock = conn.sock
            response = conn.getresponse()

            self._check_status(call, response)

            if call.method == 'HEAD':
                return dict(response.getheaders())

            if call.stream or call.hijack:
                # Live streams may stay quiet for longer than the request timeout
                if sock is not None:
                    sock.settimeout(None)
                keep_open = True
                return self._open_stream(call, conn, response, sock)

            response_data = response.read()
            if not response_data:
                return None

            # Try to parse as JSON
            try:
                return json.loads(response_data.decode('utf-8'))
            except (json.JSONDecodeError, UnicodeDecodeError):
                # Return raw data if not JSON
                return response_data.decode('utf-8', errors='replace')

        finally:
            if not keep_open:
                conn.close()

    def _open_stream(self, call: Call, conn, response, sock) -> Stream:
        upgraded = response.status == 101
        if upgraded or call.open_stdin:
            # Raw duplex connection: read from the socket file, write to the socket
            reader = response.fp if upgraded else response
            return Stream(reader, response=response, connection=conn, sock=sock,
                          chunk_size=self.config.chunk_size)
        return Stream(response, response=response, connection=conn,
                      chunk_size=self.config.chunk_size)

    def _check_status(self, call: Call, response):
        status = response.status
        if call.status_codes.is_success(status):
            return

        error_body = response.read().decode('utf-8', errors='replace')
        try:
            error_data = json.loads(error_body)
            explanation = error_data.get('message', error_body)
        except (json.JSONDecodeError, AttributeError):
            explanation = error_body.strip()

        failure = call.status_codes.failure(status)
        raise create_api_error(
            status,
            failure.kind,
            failure.label,
            resource=failure.resource or call.resource,
            explanation=explanation,
            response=response,
        )
