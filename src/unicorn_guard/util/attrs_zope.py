from attr import attrs, attrib


@attrs(repr=False, slots=True, hash=True)
class _ProvidesValidator:
    interface = attrib()

    def __call__(self, inst, attr, value):
        if not self.interface.providedBy(value):
            raise TypeError(
                "'{name}' must provide {interface!r} which {value!r} doesn't.".format(
                    name=attr.name, interface=self.interface, value=value,
                ),
                attr,
                self.interface,
                value,
            )

    def __repr__(self):
        return f"<provides validator for interface {self.interface!r}>"


def provides(interface):
    """
    An attrs validator requiring ``interface.providedBy(value)``.

    ``attr.validators.provides`` is deprecated, so profiles and the
    save guard use this one to check their collaborators.

    :raises TypeError: naming the attribute, the interface and the value
    """
    return _ProvidesValidator(interface)
