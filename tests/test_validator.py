"""
Tests for Validator

Covers the pass/fail entry points, the validate() exception path, after
hooks, custom rule objects and functions, inline messages and locales.
"""
import pytest

from form_validation import (
    MISSING,
    InvalidRuleParameterError,
    MessageBag,
    RuleExecutionError,
    UnknownRuleError,
    ValidationFailedError,
    ValidationResult,
    ValidationRule,
    Validator,
    make,
    set_locale,
    validate,
)
from form_validation.rules import RegistrationRule, Uppercase


@pytest.fixture
def login_rules():
    return {
        'username': 'required',
        'password': 'required',
    }


@pytest.fixture
def account_rules():
    return {
        'username': 'required|email|max:100',
        'password': ['required', 'min:6', 'max:20'],
    }


class TestPassesAndFails:
    """Test passes() / fails() on simple required rules."""

    def test_make_returns_validator(self, login_rules):
        validator = make({'username': 'admin', 'password': '12345'}, login_rules)
        assert isinstance(validator, Validator)

    def test_valid_data_passes(self, login_rules):
        validator = make({'username': 'admin', 'password': '12345'}, login_rules)

        assert validator.passes() is True
        assert validator.fails() is False
        assert validator.errors().is_empty()

    def test_empty_strings_fail(self, login_rules):
        validator = make({'username': '', 'password': ''}, login_rules)

        assert validator.passes() is False
        assert validator.fails() is True

        errors = validator.errors()
        assert errors.keys() == ['username', 'password']
        assert len(errors.get('username')) == 1
        assert len(errors.get('password')) == 1

    def test_missing_required_field_fails(self, login_rules):
        validator = make({'username': 'admin'}, login_rules)

        assert validator.fails()
        assert validator.errors().has('password')
        assert not validator.errors().has('username')

    def test_default_required_message(self, login_rules):
        validator = make({'username': '', 'password': 'x'}, login_rules)
        validator.fails()

        assert validator.errors().first('username') == 'The username field is required.'

    def test_passes_is_idempotent(self, login_rules):
        validator = make({'username': '', 'password': ''}, login_rules)

        assert validator.passes() is False
        first = validator.errors().all()
        assert validator.passes() is False

        assert validator.errors().all() == first
        assert validator.errors().count() == 2

    def test_errors_runs_validation_when_needed(self, login_rules):
        validator = make({'username': '', 'password': 'x'}, login_rules)
        assert validator.errors().has('username')

    def test_error_field_order_follows_rule_order(self):
        validator = make(
            {'b': '', 'a': ''},
            {'a': 'required', 'b': 'required'},
        )
        validator.fails()
        assert validator.errors().keys() == ['a', 'b']

    def test_input_snapshot_is_read_only(self, login_rules):
        data = {'username': 'admin', 'password': 'x'}
        validator = make(data, login_rules)
        data['username'] = ''

        assert validator.passes()
        with pytest.raises(TypeError):
            validator.get_data()['username'] = ''


class TestValidateMethod:
    """Test validate() and validated()."""

    def test_validate_raises_on_invalid_data(self, login_rules):
        validator = make({'username': '', 'password': ''}, login_rules)

        with pytest.raises(ValidationFailedError) as exc_info:
            validator.validate()

        assert exc_info.value.validator is validator
        assert exc_info.value.errors.has('username')

    def test_exception_bag_matches_fails_bag(self, login_rules):
        data = {'username': '', 'password': ''}

        with pytest.raises(ValidationFailedError) as exc_info:
            make(data, login_rules).validate()

        other = make(data, login_rules)
        assert other.fails()
        assert exc_info.value.errors == other.errors()

    def test_exception_message_summarizes_errors(self, login_rules):
        with pytest.raises(ValidationFailedError) as exc_info:
            make({'username': '', 'password': ''}, login_rules).validate()

        assert str(exc_info.value) == 'The username field is required. (and 1 more error)'

    def test_validate_returns_only_declared_fields(self, account_rules):
        data = {
            'username': 'admin@gmail.com',
            'password': 'rahasia',
            'admin': True,
            'others': 'xxx',
        }

        valid = make(data, {
            'username': 'required|email|max:100',
            'password': 'required|min:6|max:20',
        }).validate()

        assert valid == {'username': 'admin@gmail.com', 'password': 'rahasia'}

    def test_validated_skips_absent_optional_fields(self):
        validator = make({'name': 'x'}, {'name': 'required', 'nickname': 'min:2'})
        assert validator.validated() == {'name': 'x'}

    def test_validated_raises_when_invalid(self, login_rules):
        validator = make({'username': ''}, login_rules)
        with pytest.raises(ValidationFailedError):
            validator.validated()


class TestRunAndResult:
    """Test run() and the module-level validate()."""

    def test_run_success(self, login_rules):
        result = make({'username': 'admin', 'password': '12345', 'extra': 1}, login_rules).run()

        assert isinstance(result, ValidationResult)
        assert result
        assert result.passed
        assert result.validated_data == {'username': 'admin', 'password': '12345'}
        assert result.errors == MessageBag()

    def test_run_failure(self, login_rules):
        result = validate({'username': '', 'password': ''}, login_rules)

        assert not result
        assert result.validated_data == {}
        assert result.errors.keys() == ['username', 'password']


class TestMultipleRules:
    """Test several rules per field."""

    def test_email_failure_with_indonesian_locale(self, account_rules):
        set_locale('id')
        validator = make({'username': 'Ivriel', 'password': 'Ivriel'}, account_rules)

        assert validator.fails()
        assert validator.errors().to_structured() == {
            'username': ['username harus berupa alamat surel yang valid.'],
        }

    def test_required_short_circuits_field(self):
        validator = make({'password': ''}, {'password': 'required|min:6'})
        validator.fails()

        assert validator.errors().get('password') == ['The password field is required.']

    def test_non_required_rules_all_run(self):
        validator = make({'contact': 'abc'}, {'contact': 'email|min:10'})
        validator.fails()

        assert validator.errors().get('contact') == [
            'The contact field must be a valid email address.',
            'The contact field must be at least 10 characters.',
        ]

    def test_bail_stops_at_first_failure(self):
        validator = make({'contact': 'abc'}, {'contact': 'bail|email|min:10'})
        validator.fails()

        assert validator.errors().get('contact') == [
            'The contact field must be a valid email address.',
        ]

    def test_absent_optional_field_is_valid(self):
        assert make({}, {'email': 'email|max:100'}).passes()

    def test_blank_optional_field_is_valid(self):
        assert make({'nickname': '  '}, {'nickname': 'min:3'}).passes()

    def test_none_fails_without_nullable(self):
        validator = make({'middle_name': None}, {'middle_name': 'string'})

        assert validator.fails()
        assert validator.errors().first('middle_name') == 'The middle name field must be a string.'

    def test_nullable_skips_none(self):
        assert make({'middle_name': None}, {'middle_name': 'nullable|string|max:5'}).passes()

    def test_numeric_size(self):
        validator = make({'age': '17'}, {'age': 'numeric|min:18'})
        validator.fails()

        assert validator.errors().get('age') == ['The age field must be at least 18.']

    @pytest.mark.parametrize('value', ['Infinity', 'inf', 'nan', '1_000', '0x1A'])
    def test_numeric_rejects_non_decimal_strings(self, value):
        assert make({'age': value}, {'age': 'numeric'}).fails()

    @pytest.mark.parametrize('value', ['42', '-3.5', '+.5', '1e3', ' 7 '])
    def test_numeric_accepts_decimal_strings(self, value):
        assert make({'age': value}, {'age': 'numeric'}).passes()

    def test_infinity_does_not_satisfy_min(self):
        validator = make({'age': 'Infinity'}, {'age': 'numeric|min:18'})

        assert validator.fails()
        assert validator.errors().first('age') == 'The age field must be a number.'

    def test_number_size(self):
        assert make({'age': 18}, {'age': 'min:18|max:65'}).passes()
        assert make({'age': 66}, {'age': 'min:18|max:65'}).fails()

    def test_array_size(self):
        validator = make({'tags': ['a']}, {'tags': 'min:2'})
        validator.fails()

        assert validator.errors().first('tags') == 'The tags field must have at least 2 items.'

    def test_cross_field_rules(self):
        validator = make(
            {'username': 'x', 'password': 'x', 'password_confirmation': 'y'},
            {'password': 'required|different:username|confirmed'},
        )
        validator.fails()

        assert validator.errors().get('password') == [
            'The password field and username must be different.',
            'The password field confirmation does not match.',
        ]

    def test_in_rule(self):
        validator = make({'role': 'root'}, {'role': 'in:admin,editor'})

        assert validator.fails()
        assert validator.errors().first('role') == 'The selected role is invalid.'
        assert make({'role': 'editor'}, {'role': 'in:admin,editor'}).passes()


class TestAfterHooks:
    """Test after() cross-field hooks."""

    def test_after_hook_adds_cross_field_error(self, account_rules):
        data = {'username': 'ivriel@gmail.com', 'password': 'ivriel@gmail.com'}
        validator = make(data, account_rules)

        def password_differs(v):
            values = v.get_data()
            if values['username'] == values['password']:
                v.errors().add('password', 'Password tidak boleh sama dengan username')

        validator.after(password_differs)

        assert validator.passes() is False
        assert validator.fails() is True
        assert validator.errors().to_structured() == {
            'password': ['Password tidak boleh sama dengan username'],
        }

    def test_after_returns_validator(self, login_rules):
        validator = make({'username': 'a', 'password': 'b'}, login_rules)
        assert validator.after(lambda v: None) is validator

    def test_after_hook_runs_once_per_run(self, login_rules):
        calls = []
        validator = make({'username': 'a', 'password': 'b'}, login_rules)
        validator.after(lambda v: calls.append(1))

        validator.passes()
        validator.passes()

        assert len(calls) == 2

    def test_after_hook_sees_per_field_errors(self, login_rules):
        seen = []
        validator = make({'username': '', 'password': 'b'}, login_rules)
        validator.after(lambda v: seen.append(v.errors().keys()))
        validator.fails()

        assert seen == [['username']]


class TestCustomRules:
    """Test custom rule objects and inline functions."""

    def test_rule_objects(self):
        data = {'username': 'ivriel@gmail.com', 'password': 'ivriel@gmail.com'}
        validator = make(data, {
            'username': ['required', 'email', 'max:100', Uppercase()],
            'password': ['required', 'min:6', 'max:20', RegistrationRule()],
        })

        assert validator.fails()
        assert validator.errors().to_structured() == {
            'username': ['The username must be UPPERCASE'],
            'password': ['password must be different from username'],
        }

    def test_inline_function_rule(self):
        def uppercase(attribute, value, fail):
            if value.upper() != value:
                fail(f"The field {attribute} must be UPPERCASE")

        data = {'username': 'ivriel@gmail.com', 'password': 'ivriel@gmail.com'}
        validator = make(data, {
            'username': ['required', 'email', 'max:100', uppercase],
            'password': ['required', 'min:6', 'max:20', RegistrationRule()],
        })

        assert validator.fails()
        message = validator.errors().first('username')
        assert 'username' in message
        assert message == 'The field username must be UPPERCASE'

    def test_function_rule_skipped_for_absent_field(self):
        calls = []
        validator = make({}, {'code': [lambda a, v, fail: calls.append(v)]})

        assert validator.passes()
        assert calls == []

    def test_implicit_rule_object_runs_for_absent_field(self):
        class MustBePresent(ValidationRule):
            implicit = True

            def validate(self, attribute, value, fail):
                if value is MISSING:
                    fail(':attribute is missing')

        validator = make({}, {'token': [MustBePresent()]})

        assert validator.fails()
        assert validator.errors().first('token') == 'token is missing'

    def test_stateful_rule_object_reused_by_caller(self):
        class Counting(ValidationRule):
            def __init__(self):
                self.calls = 0

            def validate(self, attribute, value, fail):
                self.calls += 1

        rule = Counting()
        make({'a': 'x'}, {'a': [rule]}).passes()
        make({'a': 'y'}, {'a': [rule]}).passes()

        assert rule.calls == 2

    def test_rule_exception_is_wrapped(self):
        def broken(attribute, value, fail):
            raise ValueError("boom")

        validator = make({'a': 'x'}, {'a': [broken]})

        with pytest.raises(RuleExecutionError) as exc_info:
            validator.passes()

        assert exc_info.value.attribute == 'a'
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_rule_object_exception_is_wrapped(self):
        class LookupRule(ValidationRule):
            def validate(self, attribute, value, fail):
                raise KeyError(value)

        validator = make({'code': 'x'}, {'code': ['required', LookupRule()]})

        with pytest.raises(RuleExecutionError) as exc_info:
            validator.passes()

        assert exc_info.value.attribute == 'code'
        assert isinstance(exc_info.value.__cause__, KeyError)


class TestMessages:
    """Test inline messages, attribute names and locale switching."""

    def test_inline_messages(self, account_rules):
        messages = {
            'required': ':attribute harus diisi',
            'email': ':attribute harus berupa email',
            'min': ':attribute minimal :min karakter',
            'max': ':attribute maksimal :max karakter',
        }
        validator = make({'username': 'Ivriel', 'password': 'abc'}, account_rules, messages)

        assert validator.fails()
        assert validator.errors().to_structured() == {
            'username': ['username harus berupa email'],
            'password': ['password minimal 6 karakter'],
        }

    def test_field_specific_message_wins(self, login_rules):
        messages = {
            'required': ':attribute wajib',
            'password.required': 'Isi password!',
        }
        validator = make({'username': '', 'password': ''}, login_rules, messages)
        validator.fails()

        assert validator.errors().to_structured() == {
            'username': ['username wajib'],
            'password': ['Isi password!'],
        }

    def test_capitalized_placeholder(self, login_rules):
        validator = make({'username': ''}, login_rules, {'required': ':Attribute harus diisi'})
        validator.fails()

        assert validator.errors().first('username') == 'Username harus diisi'

    def test_custom_attribute_names(self, login_rules):
        validator = make({'username': 'a'}, login_rules, attributes={'password': 'kata sandi'})
        validator.fails()

        assert validator.errors().first('password') == 'The kata sandi field is required.'

    def test_process_locale_switch(self, login_rules):
        set_locale('id')
        validator = make({'username': ''}, login_rules)
        validator.fails()

        assert validator.errors().first('username') == 'username wajib diisi.'

    def test_validator_locale_overrides_process_locale(self, login_rules):
        set_locale('id')
        validator = make({'username': ''}, login_rules, locale='en')
        validator.fails()

        assert validator.errors().first('username') == 'The username field is required.'

    def test_locale_does_not_affect_inline_messages(self, login_rules):
        set_locale('id')
        validator = make({'username': ''}, login_rules, {'required': 'Please fill :attribute'})
        validator.fails()

        assert validator.errors().first('username') == 'Please fill username'


class TestRuleErrors:
    """Test parse-time rule errors."""

    def test_unknown_rule_fails_at_construction(self):
        with pytest.raises(UnknownRuleError) as exc_info:
            make({}, {'username': 'required|uppercase_only'})
        assert exc_info.value.rule_name == 'uppercase_only'

    def test_invalid_parameter_fails_at_construction(self):
        with pytest.raises(InvalidRuleParameterError):
            make({}, {'password': 'min:abc'})

    def test_data_must_be_mapping(self, login_rules):
        with pytest.raises(TypeError):
            Validator(['not', 'a', 'mapping'], login_rules)
