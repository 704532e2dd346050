"""Generate wrappers for a small package and exercise them."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

from idlwrap import Transformer
from tests._fixtures.idl_tree import IdlTreeBuilder

IDL = """
[Constructor(DOMString name), Exposed=Window]
interface Greeter {
  const unsigned short MAX_VOLUME = 11;
  readonly attribute DOMString name;
  attribute unsigned short volume;
  DOMString greet(optional DOMString punctuation = "!");
  long sum(long... values);
  static boolean isLoud(unsigned short volume);
  Greeter twin();
  stringifier;
};

dictionary GreetingOptions {
  required DOMString to;
  boolean shout = false;
};
"""

IMPL = '''
from ..generated import Greeter as wrappers


class implementation:
    def __init__(self, constructor_args, private_data):
        self.name = constructor_args[0]
        self.volume = 3
        self.wrapper = private_data["wrapper"]

    def greet(self, punctuation):
        return f"Hello, {self.name}{punctuation}"

    def sum(self, *values):
        return sum(values)

    @staticmethod
    def isLoud(volume):
        return volume > 7

    def twin(self):
        return wrappers.create_impl([self.name + "2"])

    def __str__(self):
        return f"Greeter({self.name})"
'''


@pytest.fixture
def generated(idl_tree: IdlTreeBuilder, monkeypatch: pytest.MonkeyPatch):
    package = "idlwrap_demo_pkg"
    idl_tree.write(
        {
            "idl/greeter.idl": IDL,
            f"{package}/__init__.py": "",
            f"{package}/generated/__init__.py": "",
            f"{package}/impl/__init__.py": "",
            f"{package}/impl/Greeter_impl.py": IMPL,
        }
    )
    output = idl_tree.path(f"{package}/generated")
    Transformer().add_source(idl_tree.path("idl"), "../impl").generate(output)

    monkeypatch.syspath_prepend(str(idl_tree.path()))
    for name in [name for name in sys.modules if name.startswith(package)]:
        monkeypatch.delitem(sys.modules, name)
    yield package
    for name in [name for name in sys.modules if name.startswith(package)]:
        del sys.modules[name]


def _load(package: str, name: str):
    return importlib.import_module(f"{package}.generated.{name}")


def test_interface_wrapper_round_trip(generated: str) -> None:
    module = _load(generated, "Greeter")
    greeter = module.Greeter("Ada")

    assert module.is_(greeter)
    assert module.is_impl(module.convert(greeter))
    assert greeter.name == "Ada"
    assert greeter.greet() == "Hello, Ada!"
    assert greeter.greet(5) == "Hello, Ada5"
    assert greeter.sum(1, "2", 3.9) == 6
    assert module.Greeter.isLoud(9) is True
    assert module.Greeter.MAX_VOLUME == 11
    assert str(greeter) == "Greeter(Ada)"

    greeter.volume = 70000
    assert greeter.volume == 4464

    twin = greeter.twin()
    assert isinstance(twin, module.Greeter)
    assert twin.name == "Ada2"


def test_interface_wrapper_rejects_misuse(generated: str) -> None:
    module = _load(generated, "Greeter")
    greeter = module.Greeter("Ada")

    with pytest.raises(TypeError, match="1 argument required, but only 0 present"):
        module.Greeter()
    with pytest.raises(AttributeError):
        greeter.name = "Grace"
    with pytest.raises(TypeError, match="is not of type 'Greeter'"):
        module.convert(object())
    with pytest.raises(TypeError, match="Illegal invocation"):
        module.Greeter.greet(object())


def test_dictionary_conversion(generated: str) -> None:
    module = _load(generated, "GreetingOptions")

    assert module.convert({"to": 5}) == {"shout": False, "to": "5"}
    with pytest.raises(TypeError, match="missing required member 'to'"):
        module.convert({})
    with pytest.raises(TypeError, match="is not an object"):
        module.convert(3)


def test_bootstrap_exposes_generated_interfaces(generated: str) -> None:
    module = _load(generated, "Greeter")
    utils = _load(generated, "utils")
    namespace: dict = {}

    utils.bootstrap(namespace, "Window", module)

    assert namespace == {"Greeter": module.Greeter}
    assert module.expose == {"Window": {"Greeter": module.Greeter}}
