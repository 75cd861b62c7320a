from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from flash_mongo import ConfigurationError, Record

from .models import Admin, Product, User


class TestRecordConstruction:
    """Tests for building records from raw documents."""

    def test_construction_without_database_raises_configuration_error(self):
        """Should refuse to build a record before any database is set."""
        with pytest.raises(ConfigurationError, match="Active database has not been set"):
            Product({"name": "Lamp"})

    def test_valid_identifier_is_moved_out_of_fields(self, database):
        """Should keep the ObjectId apart from the working set of fields."""
        oid = ObjectId()
        product = Product({"_id": oid, "name": "Lamp"})

        assert product.pk == oid
        assert product.fields == {"name": "Lamp"}
        assert "_id" not in product
        assert product.get_attribute("_id") is None
        assert product["_id"] is None

    def test_non_objectid_identifier_stays_in_fields(self, database):
        """Should only extract identifiers of the accepted identifier types."""
        product = Product({"_id": "sku-1", "name": "Lamp"})

        assert product.pk is None
        assert product["_id"] == "sku-1"

    def test_document_is_copied_on_construction(self, database):
        """Should not mutate the caller's mapping."""
        oid = ObjectId()
        document = {"_id": oid, "name": "Lamp"}
        Product(document)
        assert document == {"_id": oid, "name": "Lamp"}

    def test_explicit_database_overrides_the_default(self):
        """Should resolve the table from the database passed to the constructor."""
        other = MagicMock(name="database")
        product = Product(database=other)

        other.get_collection.assert_called_once_with("Product")
        assert product.get_table() is other.get_collection.return_value

    def test_explicit_collection_needs_no_database(self, collection):
        """Should accept a collection handle directly."""
        product = Product({"name": "Lamp"}, collection=collection)
        assert product.get_table() is collection


class TestRecordTables:
    """Tests for collection naming and the shared database handle."""

    def test_table_name_defaults_to_class_name(self):
        """Should name the collection after the record class."""
        assert Product.get_table_name() == "Product"
        assert Record.get_table_name() == "Record"

    def test_collection_attribute_overrides_table_name(self, database):
        """Should honour __collection__ and inherit it."""
        assert User.get_table_name() == "users"
        assert Admin.get_table_name() == "users"
        assert User().get_table().name == "users"

    def test_set_database_is_shared_by_all_record_types(self):
        """Should expose the database set through any record class."""
        database = MagicMock(name="database")
        Product.set_database(database)

        assert Record.get_database() is database
        assert User.get_database() is database


class TestRecordAttributes:
    """Tests for dynamic attribute access and registered accessors."""

    def test_attribute_and_item_access_share_fields(self, database):
        """Should read and write the same document through both syntaxes."""
        product = Product()
        product.name = "Lamp"
        product["price"] = 12

        assert product["name"] == "Lamp"
        assert product.price == 12
        assert product.fields == {"name": "Lamp", "price": 12}

    def test_missing_attribute_reads_as_none(self, database):
        """Should return None for fields the document does not have."""
        product = Product()
        assert product.colour is None
        assert product["colour"] is None

    def test_private_names_raise_attribute_error(self, database):
        """Should not route underscore names to the document."""
        product = Product()
        with pytest.raises(AttributeError):
            _ = product._missing

    def test_membership_and_deletion(self, database):
        """Should report membership by field presence and delete silently."""
        product = Product({"name": "Lamp", "price": 12})

        assert "name" in product
        del product.name
        del product["price"]
        del product["never_there"]

        assert "name" not in product
        assert product.fields == {}

    def test_iteration_yields_field_names(self, database):
        """Should iterate over field names like a mapping."""
        product = Product({"name": "Lamp", "price": 12})
        assert sorted(product) == ["name", "price"]

    def test_set_attribute_returns_record_for_chaining(self, database):
        """Should return the record itself when no setter is registered."""
        product = Product()
        result = product.set_attribute("name", "Lamp").set_attribute("price", 3)

        assert result is product
        assert product.fields == {"name": "Lamp", "price": 3}

    def test_registered_getter_is_used(self, database):
        """Should compute attributes through the registered getter."""
        user = User({"first_name": "Ada", "last_name": "Lovelace"})

        assert user.full_name == "Ada Lovelace"
        assert user["full_name"] == "Ada Lovelace"
        assert "full_name" not in user

    def test_registered_setter_is_used_and_its_result_returned(self, database):
        """Should store through the setter and hand back what it returned."""
        user = User()
        result = user.set_attribute("email", "  Ada@Example.COM ")
        user.email = " Second@Example.com"

        assert result == "  Ada@Example.COM "
        assert user.read_field("email") == "second@example.com"

    def test_accessors_are_inherited_and_extended(self, database):
        """Should merge accessors of parent classes with the subclass ones."""
        admin = Admin({"first_name": "Grace", "last_name": "Hopper"})

        assert admin.full_name == "Grace Hopper"
        assert admin.role == "admin"
        assert "role" not in User._getters

    def test_class_attributes_are_not_shadowed_by_fields(self, database):
        """Should keep methods and properties reachable on the instance."""
        product = Product({"save": "field value"})

        assert callable(product.save)
        assert product["save"] == "field value"
        with pytest.raises(AttributeError):
            product.pk = ObjectId()

    def test_to_document_merges_identifier(self, database):
        """Should produce the exact document that save writes."""
        oid = ObjectId()
        product = Product({"_id": oid, "name": "Lamp"})

        assert product.to_document() == {"name": "Lamp", "_id": oid}
        assert product.fields == {"name": "Lamp"}

    def test_repr_shows_identifier_and_fields(self, database):
        """Should render a readable representation."""
        product = Product({"name": "Lamp"})
        assert repr(product) == "<Product pk=None fields={'name': 'Lamp'}>"

    def test_mapping_methods_support_dict_conversion(self, database):
        """Should convert to a plain dict, reading through getters."""
        user = User({"first_name": "Ada", "full_name": "stored"})

        assert list(user.keys()) == ["first_name", "full_name"]
        assert dict(user) == {"first_name": "Ada", "full_name": "Ada None"}
        assert user.values() == ["Ada", "Ada None"]
