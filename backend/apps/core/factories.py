"""factory_boy base for lifecycle-managed records."""

import factory

from .lifecycle import lifecycle_for


class LifecycleModelFactory(factory.django.DjangoModelFactory):
    """
    Creates records through the record lifecycle rather than Model.save(),
    so factory-built data passes the same validation and gets the same
    audit stamps as API-created data.
    """

    class Meta:
        abstract = True

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        return lifecycle_for(model_class).create(kwargs)
