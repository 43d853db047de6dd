"""
HTTP Test Doubles

A recording ``httpx.MockTransport`` so clients can be exercised against
scripted responses without a network.
"""

import httpx


class RecordingBackend:
    """
    Scripted HTTP backend.

    Routes are matched on (method, path). A route maps to either a fixed
    ``httpx.Response``, a callable taking the request, or an exception
    instance that is raised instead of answering.

    Usage:
        backend = RecordingBackend()
        backend.add("GET", "/api/v1/query", httpx.Response(200, content=body))
        async with backend.client() as http_client:
            ...
        assert backend.requests[0].url.params["query"] == "up"
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], object] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, answer: object) -> "RecordingBackend":
        self.routes[(method.upper(), path)] = answer
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get((request.method, request.url.path))
        if answer is None:
            return httpx.Response(404, text=f"no route for {request.method} {request.url.path}")
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(request)
        return answer

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport())

    def last(self, method: str, path: str) -> httpx.Request:
        matching = [r for r in self.requests if r.method == method and r.url.path == path]
        assert matching, f"no {method} {path} request recorded"
        return matching[-1]
