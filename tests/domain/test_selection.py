from collections import Counter

from assessment_engine.domain.selection import select_questions, shuffle_in_place


def test_without_shuffle_keeps_deck_order_and_truncates():
    assert select_questions([5, 6, 7, 8], 3, shuffle=False) == [5, 6, 7]

def test_fewer_questions_than_requested_takes_all():
    assert select_questions([1, 2], 10, shuffle=False) == [1, 2]

def test_empty_deck_yields_no_questions():
    assert select_questions([], 5, shuffle=True) == []

def test_shuffled_selection_is_a_subset_without_duplicates():
    pool = list(range(1, 51))
    selected = select_questions(pool, 20, shuffle=True)
    assert len(selected) == 20
    assert len(set(selected)) == 20
    assert set(selected) <= set(pool)

def test_shuffle_does_not_mutate_the_input():
    pool = [1, 2, 3, 4]
    select_questions(pool, 4, shuffle=True)
    assert pool == [1, 2, 3, 4]

def test_fisher_yates_swaps_with_supplied_randomness():
    items = [1, 2, 3, 4]
    # always pick index 0: each step swaps the tail with the head
    shuffle_in_place(items, randbelow=lambda n: 0)
    assert items == [2, 3, 4, 1]

def test_identity_randomness_leaves_order_untouched():
    items = [1, 2, 3, 4]
    shuffle_in_place(items, randbelow=lambda n: n - 1)
    assert items == [1, 2, 3, 4]

def test_every_permutation_of_three_is_reachable():
    seen = Counter()
    for _ in range(600):
        seen[tuple(select_questions([1, 2, 3], 3, shuffle=True))] += 1
    assert len(seen) == 6
