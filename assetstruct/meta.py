"""
Machinery to declare a record as a class: every attribute that is a field
becomes a slot of the record, in the order it's written

    class SphereZ(Chunk):
        center = Vec3f()
        radius = fields.StructField('f')

The object assigned in the class body is only a template: each instance of
the record works on its own copy, created the first time it's accessed.
"""
import copy
import logging


logger = logging.getLogger(__name__)


class FieldDescriptor:
    """Gives each record instance its own copy of the template field."""

    def __init__(self, template: "Field", name: str):
        self.template = template
        self.template.name = name

    @property
    def name(self):
        return self.template.name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self.template

        slots = instance.__dict__
        if self.name not in slots:
            logger.debug("instancing field '%s' of %s", self.name, instance.__class__.__name__)
            slots[self.name] = self.template.create(father=instance)

        return slots[self.name]

    def __set__(self, instance, value):
        # a field of the right kind replaces the current one, anything else is its new value
        if isinstance(value, self.template.__class__):
            value.father = instance
            value.name = self.name
            instance.__dict__[self.name] = value
            return

        self.__get__(instance).value = value


class FieldBase:

    def contribute_to_chunk(self, cls, name):
        # shadowing attributes of Field itself (like "size") is allowed, redefining a field is not
        if isinstance(cls.__dict__.get(name), FieldDescriptor):
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        '''Return a copy of this field attached to father.'''
        # the father of the template must not be dragged into the copy
        template_father, self.father = self.father, None
        try:
            instance = copy.deepcopy(self)
        finally:
            self.father = template_father

        instance.father = father
        return instance


class Meta:
    """Layout of a record: the names of its fields in binary order."""

    def __init__(self, fields=None):
        self.fields = list(fields or [])

    def add_field(self, name):
        # a redefined field keeps the position it has in the parent
        if name not in self.fields:
            self.fields.append(name)


class MetaChunk(type):

    def __new__(mcs, name, bases, attrs):
        # the body is added after the class exists, so that the descriptors
        # are installed on it and not left as plain attributes
        new_attrs = {'__module__': attrs.pop('__module__')}
        if '__qualname__' in attrs:
            new_attrs['__qualname__'] = attrs.pop('__qualname__')
        if '__classcell__' in attrs:
            new_attrs['__classcell__'] = attrs.pop('__classcell__')

        new_cls = super().__new__(mcs, name, bases, new_attrs)

        # the fields of the parents come first, their descriptors are found via the MRO
        inherited = [_ for base in bases if isinstance(base, MetaChunk) for _ in base._meta.fields]
        new_cls._meta = Meta()
        for field_name in inherited:
            new_cls._meta.add_field(field_name)

        for attr_name, value in attrs.items():
            new_cls.add_to_class(attr_name, value)

        return new_cls

    def add_to_class(cls, name, value):
        if not hasattr(value, 'contribute_to_chunk'):
            setattr(cls, name, value)
            return

        logger.debug("adding field '%s' to %s", name, cls.__name__)
        cls._meta.add_field(name)
        value.contribute_to_chunk(cls, name)
