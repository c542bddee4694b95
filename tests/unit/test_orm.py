"""
Tests for the RowMapper facade and its builder.
"""
import datetime
import math
from collections import namedtuple
from decimal import Decimal

import numpy as np
import pytest
import rowmapper
from rowmapper import RowMapper, RowValues
from rowmapper.exceptions import ColumnNotFoundError, TypeConversionError
from rowmapper.exceptions import UnsupportedTypeError
from tests.fixtures.records import Address, Contractor, Customer, Document, Event
from tests.fixtures.records import FrozenPoint, Home, Invoice, Measurement, Order
from tests.fixtures.records import Parcel, Person, Review
from tests.fixtures.records import decimal_adapter


def test_from_row_creates_instance(mapper, person_row):
    person = mapper.from_row(person_row, Person)
    assert person == Person('Alice', 30, None)


def test_from_row_fills_existing_instance(mapper, person_row):
    person = Person('Old', 1, 'nick')
    result = mapper.from_row(person_row, person)
    assert result is person
    assert person == Person('Alice', 30, None)


def test_from_row_embedded(mapper, customer_row):
    customer = mapper.from_row(customer_row, Customer)
    assert customer == Customer(7, Address('Main St', 'Springfield'), 'a@b.c')


def test_from_row_nested_embedding(mapper, customer_row):
    order = mapper.from_row({'ORDER_ID': 99, **customer_row}, Order)
    assert order.orderId == 99
    assert order.customer.address.city == 'Springfield'


def test_from_row_missing_column(mapper):
    with pytest.raises(ColumnNotFoundError):
        mapper.from_row({'NAME': 'Alice'}, Person)


def test_from_row_null_into_non_nullable(mapper):
    with pytest.raises(TypeConversionError):
        mapper.from_row({'NAME': 'Alice', 'AGE': None, 'NICKNAME': None}, Person)


def test_from_row_frozen_dataclass(mapper):
    point = mapper.from_row({'X': 1, 'Y': 2}, FrozenPoint)
    assert point == FrozenPoint(1, 2)


def test_from_row_accepts_namedtuples(mapper):
    Row = namedtuple('Row', ['NAME', 'AGE', 'NICKNAME'])
    assert mapper.from_row(Row('Bob', 20, 'bobby'), Person) == Person('Bob', 20, 'bobby')


def test_to_values(mapper):
    values = mapper.to_values(Person('Alice', 30, None))
    assert isinstance(values, RowValues)
    assert values == {'NAME': 'Alice', 'AGE': 30, 'NICKNAME': None}
    assert values.columns() == ['NAME', 'AGE', 'NICKNAME']


def test_to_values_embedded(mapper):
    values = mapper.to_values(Customer(7, Address('Main St', 'Springfield'), None))
    assert values == {'ID': 7, 'STREET': 'Main St', 'CITY': 'Springfield', 'EMAIL': None}


def test_round_trip(mapper):
    """Test serialize then populate reproduces every field"""
    original = Measurement(
        sensorId=np.int16(3), count=np.int32(40), total=np.int64(2**40),
        ratio=np.float32(0.5), value=3.25, flag=True, payload=b'\x00\xff', label=None)

    values = mapper.to_values(original)
    restored = mapper.from_row(values, Measurement)

    assert restored == original
    assert type(restored.sensorId) is np.int16
    assert type(restored.ratio) is np.float32


def test_round_trip_embedded(mapper):
    original = Order(5, Customer(7, Address('Main St', 'Springfield'), 'a@b.c'))
    assert mapper.from_row(mapper.to_values(original), Order) == original


def test_mixed_class_hierarchies(mapper):
    """Test inherited fields survive across dataclass and plain class bases"""
    assert mapper.get_projection(Document) == ['CREATED_BY', 'TITLE']
    assert mapper.get_projection(Contractor) == ['ID', 'FULL_NAME', 'SALARY', 'AGENCY']
    assert mapper.get_writable_columns(Review) == [
        'ID', 'FULL_NAME', 'SALARY', 'AGENCY', 'SCORE']

    row = {'ID': 3, 'FULL_NAME': 'Ann Lee', 'SALARY': 10.5, 'AGENCY': 'Acme'}
    contractor = mapper.from_row(row, Contractor)
    assert contractor.agency == 'Acme'
    assert contractor.fullName == 'Ann Lee'
    assert mapper.to_values(contractor) == row

    document = mapper.from_row({'CREATED_BY': 'ann', 'TITLE': 'Notes'}, Document)
    assert (document.createdBy, document.title) == ('ann', 'Notes')


def test_to_values_embedded_none(mapper):
    """Test an embedded field holding None writes NULL in all of its columns"""
    values = mapper.to_values(Parcel(2.5, None))
    assert values == {'WEIGHT': 2.5, 'STREET': None, 'CITY': None}

    values = mapper.to_values(Order(5, None))
    assert values == {'ORDER_ID': 5, 'ID': None, 'STREET': None, 'CITY': None,
                      'EMAIL': None}


def test_nullable_float_nan_reads_as_none(mapper):
    """Test NaN in a nullable field is written unchanged and read back as None"""
    values = mapper.to_values(Parcel(float('nan'), Address('a', 'b')))
    assert math.isnan(values['WEIGHT'])

    parcel = mapper.from_row(values, Parcel)
    assert parcel.weight is None
    assert parcel.destination == Address('a', 'b')


def test_list_from_rows(mapper):
    rows = [
        {'NAME': 'Alice', 'AGE': 10, 'NICKNAME': None},
        {'NAME': 'Bob', 'AGE': 20, 'NICKNAME': 'bobby'},
    ]
    assert mapper.list_from_rows(rows, Person) == [Person('Alice', 10), Person('Bob', 20, 'bobby')]


def test_list_from_rows_empty(mapper):
    """Test empty or absent result sets give an empty list without building a plan"""
    assert mapper.list_from_rows([], Invoice) == []
    assert mapper.list_from_rows(None, Invoice) == []


def test_list_from_rows_gives_distinct_instances(mapper):
    rows = [{'STREET': 'a', 'CITY': 'b'}, {'STREET': 'c', 'CITY': 'd'}]
    homes = mapper.list_from_rows(rows, Home)
    assert homes[0].address is not homes[1].address
    assert [h.address.street for h in homes] == ['a', 'c']


def test_iter_from_rows_is_lazy(mapper):
    rows = iter([{'NAME': 'Alice', 'AGE': 10, 'NICKNAME': None}, {'NAME': 'broken'}])
    records = mapper.iter_from_rows(rows, Person)
    assert next(records) == Person('Alice', 10)
    with pytest.raises(ColumnNotFoundError):
        next(records)


def test_function_for(mapper, person_row):
    convert = mapper.function_for(Person)
    assert convert(person_row) == Person('Alice', 30)
    assert convert(person_row) is not convert(person_row)


def test_function_for_fails_fast(mapper):
    with pytest.raises(UnsupportedTypeError):
        mapper.function_for(Invoice)


def test_column_reader(mapper):
    """Test single column readers use the registered type adapters"""
    read_age = mapper.get_column('AGE').as_type(int)
    assert read_age({'AGE': '42'}) == 42

    read_nickname = mapper.column_reader('NICKNAME', str | None)
    assert read_nickname({'NICKNAME': None}) is None
    assert read_nickname({'NICKNAME': 'bobby'}) == 'bobby'

    with pytest.raises(ColumnNotFoundError):
        read_age({'NAME': 'Alice'})


def test_column_reader_fails_fast(mapper):
    with pytest.raises(UnsupportedTypeError):
        mapper.get_column('AMOUNT').as_type(Decimal)
    with pytest.raises(ValueError):
        mapper.get_column('')
    with pytest.raises(ValueError):
        mapper.get_column(None)


def test_builder_registers_custom_adapters():
    mapper = (RowMapper.Builder()
              .register_type_adapter(Decimal, decimal_adapter, nullable=True)
              .build())

    invoice = mapper.from_row({'NUMBER': 1, 'AMOUNT': '9.99', 'DISCOUNT': None}, Invoice)
    assert invoice == Invoice(1, Decimal('9.99'), None)
    assert mapper.to_values(Invoice(2, Decimal('1.50'), Decimal('0.25'))) == {
        'NUMBER': 2, 'AMOUNT': '1.50', 'DISCOUNT': '0.25'}
    assert mapper.column_reader('AMOUNT', Decimal)({'AMOUNT': 3}) == Decimal('3')


def test_builder_snapshots_are_independent():
    """Test later registrations never reach a mapper already built"""
    builder = RowMapper.Builder()
    before = builder.build()
    builder.register_type_adapter(Decimal, decimal_adapter, nullable=True)
    after = builder.build()

    with pytest.raises(UnsupportedTypeError):
        before.plan_for(Invoice)
    assert after.get_projection(Invoice) == ['NUMBER', 'AMOUNT', 'DISCOUNT']
    with pytest.raises(UnsupportedTypeError):
        RowMapper().plan_for(Invoice)


def test_builder_temporal_adapters():
    mapper = RowMapper.Builder().register_temporal_adapters().build()
    event = Event('launch', datetime.date(2024, 1, 2), None)

    values = mapper.to_values(event)
    assert values == {'NAME': 'launch', 'DAY': '2024-01-02', 'STARTS_AT': None}
    assert mapper.from_row(values, Event) == event


def test_builder_options():
    mapper = RowMapper.Builder(column_naming='verbatim').build()
    assert mapper.get_projection(Person) == ['name', 'age', 'nickname']

    mapper = RowMapper.Builder().with_options(column_naming='upper').build()
    assert mapper.get_projection(Customer) == ['ID', 'STREET', 'CITY', 'EMAIL']


def test_module_level_facade(person_row):
    person = rowmapper.from_row(person_row, Person)
    assert person == Person('Alice', 30)
    assert rowmapper.to_values(person) == person_row
    assert rowmapper.list_from_rows([person_row], Person) == [person]
    assert rowmapper.get_projection(Person) == ['NAME', 'AGE', 'NICKNAME']
    assert rowmapper.get_default_mapper() is rowmapper.get_default_mapper()


if __name__ == '__main__':
    __import__('pytest').main([__file__])
