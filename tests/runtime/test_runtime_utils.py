"""Tests for the utility module copied next to generated wrappers."""

from __future__ import annotations

import types

from idlwrap.runtime import utils


class _Wrapper:
    pass


class _Impl:
    pass


def test_link_associates_wrapper_and_impl() -> None:
    wrapper, impl = _Wrapper(), _Impl()

    utils.link(wrapper, impl)

    assert utils.impl_for_wrapper(wrapper) is impl
    assert utils.wrapper_for_impl(impl) is wrapper
    assert utils.try_wrapper_for_impl(impl) is wrapper
    assert utils.try_impl_for_wrapper(wrapper) is impl


def test_try_helpers_return_unlinked_values_unchanged() -> None:
    value = _Impl()

    assert utils.wrapper_for_impl(value) is None
    assert utils.impl_for_wrapper(value) is None
    assert utils.try_wrapper_for_impl(value) is value
    assert utils.try_impl_for_wrapper(5) == 5


def test_is_object() -> None:
    assert utils.is_object(_Impl())
    assert utils.is_object([])
    assert not utils.is_object(None)
    assert not utils.is_object("text")
    assert not utils.is_object(3.5)


def test_bootstrap_installs_exposed_interfaces() -> None:
    class Foo:
        pass

    class Bar:
        pass

    foo_module = types.SimpleNamespace(expose={"Window": {"Foo": Foo}, "Worker": {"Foo": Foo}})
    bar_module = types.SimpleNamespace(expose={"Worker": {"Bar": Bar}})
    namespace: dict = {}
    target = types.SimpleNamespace()

    installed = utils.bootstrap(namespace, "Window", foo_module, bar_module)
    utils.bootstrap(target, "Worker", foo_module, bar_module)

    assert installed == ["Foo"]
    assert namespace == {"Foo": Foo}
    assert target.Foo is Foo and target.Bar is Bar
