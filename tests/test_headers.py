from rpcwire.networking.headers import HeaderProcessorChain


class _Recorder:
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def compose_request(self, headers):
        self.log.append(("compose", self.name))
        headers[f"X-{self.name}"] = "1"

    def parse_response(self, headers):
        self.log.append(("parse", self.name))


def test_chain_runs_processors_in_registration_order():
    log = []
    chain = HeaderProcessorChain()
    chain.register(_Recorder("a", log))
    chain.register(_Recorder("b", log))
    headers = {}

    chain.compose_request(headers)
    chain.parse_response({})

    assert log == [
        ("compose", "a"),
        ("compose", "b"),
        ("parse", "a"),
        ("parse", "b"),
    ]
    assert headers == {"X-a": "1", "X-b": "1"}


def test_register_first_prepends():
    log = []
    chain = HeaderProcessorChain([_Recorder("later", log)])
    chain.register(_Recorder("first", log), first=True)

    chain.parse_response({})

    assert [name for _, name in log] == ["first", "later"]
    assert [p.name for p in chain] == ["first", "later"]
    assert len(chain) == 2


def test_empty_chain_leaves_headers_alone():
    headers = {"Accept": "text/xml"}

    HeaderProcessorChain().compose_request(headers)

    assert headers == {"Accept": "text/xml"}
