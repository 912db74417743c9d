"""Strategy-specific behaviour: ant colony, genetic, annealing, tabu."""

from __future__ import annotations

import math
import random
from itertools import combinations_with_replacement

import pytest

from jobshop.algorithms import annealing, ant_colony, genetic, tabu
from jobshop.evaluation import evaluate
from jobshop.models import Solution
from jobshop.operations import validate_schedule
from jobshop.params import AnnealingParams, AntColonyParams, GeneticParams, TabuParams


def _is_block_schedule(schedule) -> bool:
    seen: list[int] = []
    for job in schedule:
        if not seen or seen[-1] != job:
            if job in seen:
                return False
            seen.append(job)
    return True


# ---------------------------------------------------------------- ant colony


def test_heuristic_weights_reference(reference_model) -> None:
    weights = ant_colony.heuristic_weights(reference_model, beta=2.0)
    assert weights == pytest.approx([1 / 64, 1 / 64, 1 / 121])


def test_roulette_never_picks_zero_score() -> None:
    rng = random.Random(0)
    picks = {ant_colony.roulette_select([0, 1, 2], [0.0, 5.0, 0.0], rng) for _ in range(200)}
    assert picks == {1}


def test_roulette_uniform_fallback_on_zero_total() -> None:
    rng = random.Random(0)
    picks = {ant_colony.roulette_select([3, 4], [0.0, 0.0], rng) for _ in range(200)}
    assert picks == {3, 4}


def test_update_pheromone_evaporates_then_deposits() -> None:
    pheromone = ant_colony.init_pheromone(3)
    ant_colony.update_pheromone(pheromone, [[0, 1, 2]], [10], evaporation=0.5, q=100.0)
    assert pheromone[0][1] == pytest.approx(10.5)
    assert pheromone[1][2] == pytest.approx(10.5)
    assert pheromone[2][0] == pytest.approx(0.5)
    assert pheromone[1][1] == pytest.approx(0.5)


def test_construct_order_operations_mode(reference_model) -> None:
    params = AntColonyParams(exhaustion="operations")
    pheromone = ant_colony.init_pheromone(reference_model.num_tasks)
    weights = ant_colony.heuristic_weights(reference_model, params.beta)
    order = ant_colony.construct_order(reference_model, pheromone, weights, params, random.Random(2))
    assert len(order) == reference_model.num_tasks
    validate_schedule(reference_model, order)


def test_construct_order_single_visit_mode(reference_model) -> None:
    params = AntColonyParams(exhaustion="single_visit")
    pheromone = ant_colony.init_pheromone(reference_model.num_tasks)
    weights = ant_colony.heuristic_weights(reference_model, params.beta)
    order = ant_colony.construct_order(reference_model, pheromone, weights, params, random.Random(2))
    assert sorted(order) == [0, 1, 2]


@pytest.mark.parametrize("exhaustion", ["operations", "single_visit"])
def test_ant_colony_both_exhaustion_modes(exhaustion, medium_model) -> None:
    params = AntColonyParams(num_ants=4, iterations=10, exhaustion=exhaustion)
    pheromone = ant_colony.init_pheromone(medium_model.num_tasks)
    sol = ant_colony.optimize(medium_model, params, random.Random(5), pheromone=pheromone)
    validate_schedule(medium_model, sol.schedule)
    assert sol.makespan == evaluate(sol.schedule, medium_model)
    # deposits only land on job-indexed cells; later rows just evaporate
    assert pheromone[medium_model.num_tasks - 1][0] == pytest.approx(0.5**10)
    reinforced = sum(sum(row[: medium_model.num_jobs]) for row in pheromone[: medium_model.num_jobs])
    assert reinforced > medium_model.num_jobs**2 * 0.5**10


def test_single_visit_ants_build_block_schedules(tmp_path, reference_model) -> None:
    path = tmp_path / "aco.csv"
    params = AntColonyParams(num_ants=3, iterations=5, exhaustion="single_visit")
    ant_colony.optimize(reference_model, params, random.Random(8), iter_log_path=str(path))
    rows = path.read_text(encoding="utf-8").splitlines()[1:]
    assert len(rows) == 5
    for row in rows:
        schedule = [int(x) for x in row.rsplit(",", 1)[1].strip('"').split()]
        assert len(schedule) == 9
        assert _is_block_schedule(schedule)


def test_ant_colony_parallel_evaluation_matches_serial(medium_model) -> None:
    serial = ant_colony.optimize(
        medium_model, AntColonyParams(num_ants=6, iterations=8), random.Random(13)
    )
    parallel = ant_colony.optimize(
        medium_model, AntColonyParams(num_ants=6, iterations=8, workers=3), random.Random(13)
    )
    assert serial == parallel


def test_ant_colony_rejects_wrong_pheromone_shape(reference_model) -> None:
    with pytest.raises(ValueError):
        ant_colony.optimize(
            reference_model,
            AntColonyParams(iterations=1),
            random.Random(0),
            pheromone=ant_colony.init_pheromone(4),
        )


# ---------------------------------------------------------------- genetic


def test_order_crossover_preserves_multiset() -> None:
    a = [0, 0, 1, 1, 2, 2]
    b = [2, 2, 1, 1, 0, 0]
    child_a, child_b = genetic.order_crossover(a, b, 3)
    assert child_a == [0, 0, 1, 2, 2, 1]
    assert child_b == [2, 2, 1, 0, 0, 1]


def test_order_crossover_random_cuts_stay_valid(medium_model) -> None:
    rng = random.Random(3)
    from jobshop.generator import create_random_schedule

    for _ in range(30):
        a = create_random_schedule(medium_model, rng=rng)
        b = create_random_schedule(medium_model, rng=rng)
        cut = rng.randrange(len(a))
        for child in genetic.order_crossover(a, b, cut):
            validate_schedule(medium_model, child)


def test_prefix_crossover_exchanges_prefixes() -> None:
    child_a, child_b = genetic.prefix_crossover([0, 0, 1, 1], [1, 1, 0, 0], 1)
    assert child_a == [1, 0, 1, 1]
    assert child_b == [0, 1, 0, 0]


def test_tournament_prefers_lower_makespan() -> None:
    population = [Solution((0,), 20), Solution((0,), 5)]
    winner = genetic.tournament_selection(population, 200, random.Random(0))
    assert winner.makespan == 5


def test_mutate_respects_rate() -> None:
    schedule = [0, 1, 2, 3]
    assert genetic.mutate(schedule, 0.0, random.Random(0)) is False
    assert schedule == [0, 1, 2, 3]
    assert genetic.mutate(schedule, 1.0, random.Random(0)) is True
    assert sorted(schedule) == [0, 1, 2, 3]


def test_genetic_prefix_mode_keeps_makespan_consistent(medium_model) -> None:
    params = GeneticParams(population_size=8, generations=15, crossover="prefix")
    sol = genetic.optimize(medium_model, params, random.Random(4))
    assert len(sol.schedule) == medium_model.num_tasks
    assert sol.makespan == evaluate(sol.schedule, medium_model)


def test_genetic_odd_population_is_truncated(reference_model) -> None:
    params = GeneticParams(population_size=5, generations=3)
    progress: list[int] = []
    sol = genetic.optimize(reference_model, params, random.Random(6), progress=progress)
    assert len(progress) == 3
    validate_schedule(reference_model, sol.schedule)


# ---------------------------------------------------------------- annealing


def test_acceptance_probability_values() -> None:
    assert annealing.acceptance_probability(10, 9, 1.0) == 1.0
    assert annealing.acceptance_probability(10, 10, 1.0) == 1.0
    assert annealing.acceptance_probability(10, 12, 2.0) == pytest.approx(math.exp(-1.0))
    assert annealing.acceptance_probability(10, 11, 1e-12) == 0.0
    assert annealing.acceptance_probability(10, 11, 0.0) == 0.0


def test_cold_annealing_never_accepts_worse(medium_model) -> None:
    params = AnnealingParams(iterations=300, initial_temperature=1e-9, cooling_rate=0.99)
    current: list[int] = []
    annealing.optimize(medium_model, params, random.Random(0), current_progress=current)
    assert len(current) == 300
    assert all(b <= a for a, b in zip(current, current[1:]))


def test_annealing_accepts_given_initial(reference_model) -> None:
    start = Solution.of(reference_model, [0, 1, 2, 0, 1, 2, 0, 1, 2])
    sol = annealing.optimize(
        reference_model, AnnealingParams(iterations=100), random.Random(1), initial=start
    )
    assert sol.makespan <= start.makespan


def test_annealing_rejects_invalid_initial(reference_model) -> None:
    with pytest.raises(ValueError):
        annealing.optimize(
            reference_model, AnnealingParams(iterations=1), initial=Solution((0, 1), 0)
        )


# ---------------------------------------------------------------- tabu


def test_tabu_list_fifo_eviction() -> None:
    tl = tabu.TabuList(3)
    moves = [(0, 1), (0, 2), (1, 2), (0, 3)]
    for move in moves:
        tl.push(move)
    assert len(tl) == 3
    assert (0, 1) not in tl
    assert (1, 0) not in tl
    assert (0, 3) in tl and (3, 0) in tl
    assert list(tl) == moves[1:]


def test_tabu_list_order_insensitive() -> None:
    tl = tabu.TabuList(2)
    tl.push((4, 7))
    assert (7, 4) in tl
    assert (4, 4) not in tl
    assert "x" not in tl


def test_tabu_list_rejects_zero_tenure() -> None:
    with pytest.raises(ValueError):
        tabu.TabuList(0)


def test_all_moves_tabu_only_aspiration_moves(reference_model) -> None:
    # every unordered job pair is tabu many times over, so only moves that
    # beat the best-ever solution may change the current one
    pairs = list(combinations_with_replacement(range(3), 2))
    tl = tabu.TabuList(len(pairs) * 10)
    for _ in range(10):
        for pair in pairs:
            tl.push(pair)
    best: list[int] = []
    current: list[int] = []
    tabu.optimize(
        reference_model,
        TabuParams(iterations=50, tenure=len(pairs) * 10),
        random.Random(0),
        progress=best,
        current_progress=current,
        tabu_list=tl,
    )
    assert current == best


def test_leading_pair_identity(medium_model) -> None:
    tl = tabu.TabuList(5)
    sol = tabu.optimize(
        medium_model,
        TabuParams(iterations=30, tenure=5, move_identity="leading_pair"),
        random.Random(2),
        tabu_list=tl,
    )
    validate_schedule(medium_model, sol.schedule)
    assert 0 < len(tl) <= 5


def test_leading_pair_helper() -> None:
    assert tabu.leading_pair((3, 1, 2)) == (3, 1)
    assert tabu.leading_pair((4,)) == (4, 4)


def test_best_of_sampled_swaps_reports_evaluated_neighbor(medium_model) -> None:
    from jobshop.generator import generate_initial

    current = generate_initial(medium_model, random.Random(0))
    neighbor, move = tabu.best_of_sampled_swaps(
        medium_model, current, 20, random.Random(1), keep_current=False
    )
    assert neighbor.makespan == evaluate(neighbor.schedule, medium_model)
    assert move[0] in current.schedule and move[1] in current.schedule


def test_best_of_sampled_swaps_keeps_current_unless_better(medium_model) -> None:
    from jobshop.generator import generate_initial

    rng = random.Random(4)
    current = generate_initial(medium_model, random.Random(0))
    for _ in range(30):
        neighbor, move = tabu.best_of_sampled_swaps(medium_model, current, 3, rng)
        if move is None:
            assert neighbor is current
        else:
            assert neighbor.makespan < current.makespan


def test_best_of_sampled_swaps_needs_samples(reference_model) -> None:
    from jobshop.generator import generate_initial

    current = generate_initial(reference_model, random.Random(0))
    with pytest.raises(ValueError):
        tabu.best_of_sampled_swaps(reference_model, current, 0, random.Random(0))


@pytest.mark.parametrize("move_identity", ["swap", "leading_pair"])
def test_tabu_current_never_worsens_by_default(medium_model, move_identity) -> None:
    current: list[int] = []
    tabu.optimize(
        medium_model,
        TabuParams(iterations=200, move_identity=move_identity),
        random.Random(0),
        current_progress=current,
    )
    assert len(current) == 200
    assert all(b <= a for a, b in zip(current, current[1:]))


def test_tabu_best_sampled_choice_stays_consistent(medium_model) -> None:
    best: list[int] = []
    current: list[int] = []
    sol = tabu.optimize(
        medium_model,
        TabuParams(iterations=100, neighbor_choice="best_sampled"),
        random.Random(0),
        progress=best,
        current_progress=current,
    )
    validate_schedule(medium_model, sol.schedule)
    assert sol.makespan == best[-1] == min([sol.makespan, *current])
