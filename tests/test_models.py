"""Tests for database models and request schemas."""

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from storefront.extensions import db
from storefront.models import User, Category, generate_hex_id
from storefront.schemas import AdminListQuery, CategoryCreate, CategoryUpdate


class TestUser:
    """Test cases for User model."""

    def test_admin_user_creation(self, app):
        """Test creating a new user."""
        with app.app_context():
            user = User(username='newuser', email='newuser@example.com', is_admin=False)
            db.session.add(user)
            db.session.commit()

            assert user.id is not None
            assert user.hex_id is not None
            assert len(user.hex_id) == 32
            assert user.username == 'newuser'
            assert user.is_admin is False
            assert user.created_at is not None

    def test_admin_user_unique_username(self, app):
        """Test that username must be unique."""
        with app.app_context():
            db.session.add(User(username='testuser1'))
            db.session.commit()

            db.session.add(User(username='testuser1', email='different@example.com'))
            with pytest.raises(IntegrityError):
                db.session.commit()
            db.session.rollback()

    def test_admin_user_get_id(self, app):
        """Test Flask-Login get_id method."""
        with app.app_context():
            user = User(username='testuser')
            db.session.add(user)
            db.session.commit()

            assert user.get_id() == str(user.id)


class TestCategory:
    """Test cases for Category model."""

    def test_category_defaults(self, app):
        """Test creating a bare top-level category row."""
        with app.app_context():
            category = Category(name='Garden', slug='garden', image='/garden.png')
            db.session.add(category)
            db.session.commit()

            assert len(category.id) == 32
            assert category.parent_id is None
            assert category.depth == 0
            assert category.path == []
            assert category.is_parent is True
            assert category.is_featured is False
            assert category.attribute_templates == []
            assert category.created_at is not None
            assert category.updated_at is not None

    def test_category_slug_unique(self, app):
        """Test that category slug must be unique."""
        with app.app_context():
            db.session.add(Category(name='Garden', slug='garden', image='/g.png'))
            db.session.commit()

            db.session.add(Category(name='Gardening', slug='garden', image='/g.png'))
            with pytest.raises(IntegrityError):
                db.session.commit()
            db.session.rollback()

    def test_category_negative_depth_rejected(self, app):
        with app.app_context():
            db.session.add(Category(name='Broken', slug='broken', image='/b.png', depth=-1))
            with pytest.raises(IntegrityError):
                db.session.commit()
            db.session.rollback()

    def test_updated_at_moves_on_update(self, app, category_factory):
        with app.app_context():
            cat = category_factory('Garden', 'garden')
            before = cat.updated_at
            cat.description = 'Outdoor'
            db.session.commit()
            assert cat.updated_at >= before

    def test_to_dict(self, app, category_tree):
        """Test the wire shape of a category."""
        with app.app_context():
            oled = category_tree['oled']
            data = oled.to_dict()
            assert set(data) == {
                'id', 'name', 'slug', 'parent', 'depth', 'path', 'image', 'banner_image',
                'is_featured', 'description', 'is_parent', 'attribute_templates',
                'created_at', 'updated_at',
            }
            assert data['parent'] == category_tree['tvs'].id
            assert data['path'] == [category_tree['electronics'].id, category_tree['tvs'].id]
            assert isinstance(data['created_at'], str)


class TestCategorySchemas:
    """Test cases for admin request payload validation."""

    def test_create_normalizes_slug_and_name(self):
        payload = CategoryCreate.model_validate({'name': '  TVs ', 'slug': ' TVs ', 'image': '/tv.png'})
        assert payload.name == 'TVs'
        assert payload.slug == 'tvs'

    def test_create_to_fields_renames_parent(self):
        payload = CategoryCreate.model_validate({
            'name': 'TVs', 'slug': 'tvs', 'image': '/tv.png', 'parent': 'a' * 32, 'banner_image': ''
        })
        fields = payload.to_fields()
        assert fields['parent_id'] == 'a' * 32
        assert 'parent' not in fields
        assert fields['banner_image'] is None

    @pytest.mark.parametrize('slug', ['has space', 'trailing-', '-leading', 'double--hyphen', 'ümlaut'])
    def test_create_rejects_bad_slug(self, slug):
        with pytest.raises(ValidationError):
            CategoryCreate.model_validate({'name': 'X', 'slug': slug, 'image': '/x.png'})

    def test_create_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            CategoryCreate.model_validate({'name': '   ', 'slug': 'x', 'image': '/x.png'})

    def test_attribute_template_types(self):
        with pytest.raises(ValidationError):
            CategoryCreate.model_validate({
                'name': 'X', 'slug': 'x', 'image': '/x.png',
                'attribute_templates': [{'name': 'Colour', 'type': 'colour'}],
            })

    def test_update_only_sends_present_fields(self):
        assert CategoryUpdate.model_validate({'name': 'New'}).to_changes() == {'name': 'New'}

    def test_update_explicit_null_parent(self):
        assert CategoryUpdate.model_validate({'parent': None}).to_changes() == {'parent_id': None}

    def test_update_rejects_null_is_featured(self):
        with pytest.raises(ValidationError):
            CategoryUpdate.model_validate({'is_featured': None})

    def test_update_allows_clearing_banner(self):
        assert CategoryUpdate.model_validate({'banner_image': None}).to_changes() == {'banner_image': None}

    def test_update_absent_parent_is_untouched(self):
        assert 'parent_id' not in CategoryUpdate.model_validate({'is_featured': True}).to_changes()

    def test_admin_list_query_parsing(self):
        params = AdminListQuery.model_validate({
            'query': '  tv ', 'page': '2', 'limit': '5', 'fetch_all': 'true', 'expanded': 'a, b,,c'
        })
        assert params.query == 'tv'
        assert params.page == 2
        assert params.limit == 5
        assert params.fetch_all is True
        assert params.expanded == ['a', 'b', 'c']

    def test_admin_list_query_flag_false(self):
        assert AdminListQuery.model_validate({'fetch_all': 'no'}).fetch_all is False


class TestGenerateHexId:
    """Test cases for hex ID generation."""

    def test_generate_hex_id_default_length(self):
        """Test generating hex ID with default length."""
        hex_id = generate_hex_id()
        assert len(hex_id) == 32
        assert all(c in '0123456789abcdef' for c in hex_id)

    def test_generate_hex_id_uniqueness(self):
        """Test that generated hex IDs are unique."""
        ids = [generate_hex_id() for _ in range(100)]
        assert len(set(ids)) == 100
