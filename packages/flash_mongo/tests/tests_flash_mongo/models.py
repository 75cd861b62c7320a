from flash_mongo import Record, attribute_getter, attribute_setter


class User(Record):
    """A record with computed and normalised attributes."""

    __collection__ = "users"

    @attribute_getter("full_name")
    def _full_name(self):
        return f"{self.first_name} {self.last_name}"

    @attribute_setter("email")
    def _email(self, value):
        self.write_field("email", value.strip().lower())
        return value


class Product(Record):
    """A record stored in the collection named after the class."""


class Admin(User):
    """Inherits the accessors of User and adds its own."""

    @attribute_getter("role")
    def _role(self):
        return "admin"
