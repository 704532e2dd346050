"""Shared helpers for generated wrapper modules.

This file is copied verbatim next to the generated modules; it links
wrapper objects with the implementation objects they expose.
"""

IMPL_ATTR = "_idlwrap_impl"
WRAPPER_ATTR = "_idlwrap_wrapper"

_PRIMITIVES = (bool, int, float, complex, str, bytes)


def is_object(value):
    return value is not None and not isinstance(value, _PRIMITIVES)


def link(wrapper, impl):
    """Associate ``wrapper`` and ``impl`` with each other."""
    object.__setattr__(wrapper, IMPL_ATTR, impl)
    setattr(impl, WRAPPER_ATTR, wrapper)


def wrapper_for_impl(impl):
    return getattr(impl, WRAPPER_ATTR, None)


def impl_for_wrapper(wrapper):
    return getattr(wrapper, IMPL_ATTR, None)


def try_wrapper_for_impl(impl):
    wrapper = wrapper_for_impl(impl)
    return impl if wrapper is None else wrapper


def try_impl_for_wrapper(wrapper):
    impl = impl_for_wrapper(wrapper)
    return wrapper if impl is None else impl


def bootstrap(target, global_name, *modules):
    """Install every interface the given modules expose on ``global_name``.

    ``target`` is either a mapping (such as a module ``__dict__``) or an
    object receiving attributes.
    """
    installed = []
    for module in modules:
        exposed = getattr(module, "expose", {}).get(global_name, {})
        for name, value in exposed.items():
            if isinstance(target, dict):
                target[name] = value
            else:
                setattr(target, name, value)
            installed.append(name)
    return installed
