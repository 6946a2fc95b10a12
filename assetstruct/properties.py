import logging
from enum import Flag


class Compliant(Flag):
    '''How strictly the data must follow the format while unpacking.

    A field without ENUM accepts integers outside of its enum, one without
    MAGIC only warns when a magic doesn't match; INHERIT delegates the
    decision to the father.'''
    NONE    = 0
    ENUM    = 1 << 0
    MAGIC   = 1 << 1
    INHERIT = 1 << 2


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.ArrayField(fields.StructField('I'), n=Dependency('.length'))

    and have the number of elements of the field named 'data' read from
    the field named 'length' at unpacking time.

    The expression starts with '.' since it refers to a field at the same
    level; further components walk down into sub-chunks ('.sphere.count').
    '''
    def __init__(self, expression):
        if not expression.startswith('.') or expression == '.':
            raise ValueError(f'\'{expression}\' must name a field at the same level, like \'.length\'')

        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        # '.miao'.split(".") -> ['', 'miao']
        field = instance.father
        self.logger.debug(' resolve from father: \'%s\'' % field.__class__.__name__)

        for component_name in self.expression.split('.')[1:]:
            field = getattr(field, component_name)

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        value = self.resolve_field(instance).value

        self.logger.debug(' resolved %r with value %s' % (self, value))

        return value


class OffsetDependency(Dependency):
    '''The resolved value is shifted by a constant, like a count stored as "length - 1".'''

    def __init__(self, delta, expression):
        super().__init__(expression)
        self._delta = delta

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression}{self._delta:+d})>'

    def resolve(self, instance):
        value = super().resolve(instance)

        return int(value) + self._delta


class Condition:
    '''Decide at unpacking time if an optional field is present.

    The decision can use the fields already unpacked in the father and the number
    of bytes remaining in the slice being unpacked: nothing in the binary data
    tags the presence of the field.'''

    def __repr__(self):
        return f'<{self.__class__.__name__}>'

    def __call__(self, father, remaining: int) -> bool:
        raise NotImplementedError(f"method {self.__class__.__name__}.__call__() not implemented")


class IfNotEmpty(Condition):
    '''The field is present when there is data left.'''

    def __call__(self, father, remaining):
        return remaining != 0


class IfRemainingNot(Condition):
    '''The field is present unless exactly "length" bytes are left at its position.'''

    def __init__(self, length: int):
        self.length = length

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.length})>'

    def __call__(self, father, remaining):
        return remaining != self.length
