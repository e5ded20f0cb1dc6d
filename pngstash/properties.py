import logging


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(Dependency('.length'))

    and have the length of the string contained in the field named 'data'
    strictly connected to the field named 'length': when unpacking the value
    is read from there, when setting the data the length is written back.

    The expression starts with '.' to indicate a field at the same level,
    i.e. a sibling reachable from the father of the field.
    '''
    def __init__(self, expression):
        if not expression.startswith('.'):
            raise ValueError(f"only relative expressions are supported, not '{expression}'")

        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        if instance.father is None:
            raise AttributeError(f"cannot resolve '{self.expression}' for a field without father")

        field = instance.father
        # '.length'.split('.') -> ['', 'length']
        for component_name in self.expression.split('.')[1:]:
            field = getattr(field, component_name)

        self.logger.debug('resolved \'%s\' as field %s' % (self.expression, field.__class__.__name__))

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        return self.resolve_field(instance).value

    def resolve_and_set(self, instance, value):
        """Write the value back into the field the expression points to."""
        if instance.father is None:
            return

        self.resolve_field(instance).value = value
