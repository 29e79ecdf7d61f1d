from __future__ import annotations

from werkzeug.datastructures import MultiDict

from conftest import closer_doc
from marketplace.directory import DirectoryFilters, find_closers


def _emails(rows):
    return [r["email"] for r in rows]


def test_no_filter_only_constrains_role():
    f = DirectoryFilters.from_params({})
    assert f.to_query() == {"role": "closer"}
    assert f.sort_spec()[0] == ("is_premium", -1)


def test_unknown_and_malformed_keys_degrade_to_no_constraint():
    f = DirectoryFilters.from_params({
        "experience": "Expert",
        "yearsExperience": "beaucoup",
        "totalClosed": "-5",
        "market": "Mars",
        "sort": "random",
        "product": "   ",
    })
    assert f.to_query() == {"role": "closer"}
    assert f.sort == "default"


def test_operator_injection_is_not_passed_through():
    f = DirectoryFilters.from_params({"market": {"$ne": None}, "product": {"$gt": ""}})
    assert f.to_query() == {"role": "closer"}


def test_product_is_escaped_case_insensitive_substring():
    q = DirectoryFilters.from_params({"product": "high.ticket"}).to_query()
    assert q["$and"] == [{"product_types": {"$regex": r"high\.ticket", "$options": "i"}}]


def test_product_types_single_value_or_list_normalized():
    single = DirectoryFilters.from_params({"productTypes": "SaaS"})
    multi = DirectoryFilters.from_params(MultiDict([("productTypes", "SaaS"), ("productTypes", "Coaching"), ("productTypes", "SaaS")]))
    assert single.product_types == ["SaaS"]
    assert multi.product_types == ["SaaS", "Coaching"]
    assert multi.to_query()["$and"] == [{"product_types": {"$in": ["SaaS", "Coaching"]}}]


def test_numeric_minimums_accept_ints_and_strings():
    f = DirectoryFilters.from_params({"yearsExperience": 5, "revenueMin": "10000"})
    clauses = f.to_query()["$and"]
    assert {"years_experience": {"$gte": 5}} in clauses
    assert {"total_closed": {"$gte": 10000}} in clauses


def test_market_and_years_experience_scenario(db):
    db.accounts.insert_many([
        closer_doc(1, market="B2B", years_experience=6),
        closer_doc(2, market="B2B", years_experience=2),
        closer_doc(3, market="B2C", years_experience=10),
        closer_doc(4, market="B2B", years_experience=5),
        {"role": "company", "email": "rh@acme.fr", "company_name": "Acme", "market": "B2B", "years_experience": 9},
    ])
    rows = find_closers(db, {"market": "B2B", "yearsExperience": 5})
    assert sorted(_emails(rows)) == ["closer1@closers.fr", "closer4@closers.fr"]
    assert all("password_hash" not in r for r in rows)


def test_each_filter_narrows(db):
    db.accounts.insert_many([
        closer_doc(1, product_types=["SaaS", "HighTicket"], contract_types=["Freelance"], profile_type="Setter"),
        closer_doc(2, product_types=["Coaching"], contract_types=["CDI"], mission_type="LongTerm"),
        closer_doc(3, product_types=["Immobilier"], total_closed=500000),
    ])
    assert _emails(find_closers(db, {"skill": "saas"})) == ["closer1@closers.fr"]
    assert _emails(find_closers(db, {"product": "TICKET"})) == ["closer1@closers.fr"]
    assert _emails(find_closers(db, {"profileType": "Setter"})) == ["closer1@closers.fr"]
    assert _emails(find_closers(db, {"missionType": "LongTerm"})) == ["closer2@closers.fr"]
    assert _emails(find_closers(db, {"contractType": "cdi"})) == ["closer2@closers.fr"]
    assert _emails(find_closers(db, {"totalClosed": "100000"})) == ["closer3@closers.fr"]
    assert sorted(_emails(find_closers(db, {"productTypes": ["Coaching", "Immobilier"]}))) == [
        "closer2@closers.fr", "closer3@closers.fr",
    ]
    # tous les filtres sont combinés en ET
    assert find_closers(db, {"skill": "saas", "contractType": "CDI"}) == []
    assert len(find_closers(db, {})) == 3


def test_best_sort_puts_premium_first_then_total_closed(db):
    db.accounts.insert_many([
        closer_doc(1, total_closed=900000),
        closer_doc(2, total_closed=1000, is_premium=True),
        closer_doc(3, total_closed=50000, is_premium=True),
        closer_doc(4, total_closed=20000),
    ])
    rows = find_closers(db, {"sort": "best"})
    assert _emails(rows) == [
        "closer3@closers.fr", "closer2@closers.fr", "closer1@closers.fr", "closer4@closers.fr",
    ]


def test_default_sort_premium_first_then_newest(db):
    db.accounts.insert_many([
        closer_doc(1, is_premium=True),
        closer_doc(2),
        closer_doc(3),
    ])
    rows = find_closers(db, {})
    assert _emails(rows) == ["closer1@closers.fr", "closer3@closers.fr", "closer2@closers.fr"]


def test_minimum_beyond_int64_is_ignored(db):
    import bson

    f = DirectoryFilters.from_params({"yearsExperience": "99999999999999999999", "totalClosed": str(2**63 - 1)})
    assert "yearsExperience" not in f.minimums
    assert f.minimums["totalClosed"] == 2**63 - 1
    # la requête reste encodable en BSON
    bson.encode(f.to_query())

    db.accounts.insert_one(closer_doc(1, years_experience=3))
    assert _emails(find_closers(db, {"yearsExperience": "99999999999999999999"})) == ["closer1@closers.fr"]
