"""점수 계산 엔진 테스트."""

import pytest

from app.schemas.enums import Bucket
from app.services.scoring import (
    ScoringContext,
    classify_bucket,
    congestion_index,
    effective_radius,
    round_half_up,
    score_candidate,
)


def _ctx(
    *,
    effective_radius_m: float = 1000.0,
    is_rainy: bool = False,
    congestion_level: str | None = None,
    congestion_idx: float = 0.0,
) -> ScoringContext:
    return ScoringContext(
        effective_radius_m=effective_radius_m,
        is_rainy=is_rainy,
        congestion_level=congestion_level,
        congestion_idx=congestion_idx,
    )


class TestCongestionIndex:
    """혼잡도 지수 매핑 테스트."""

    @pytest.mark.parametrize(
        "level,expected",
        [
            (None, 0.5),
            ("", 0.5),
            ("   ", 0.5),
            ("여유", 0.15),
            ("보통", 0.45),
            ("약간 붐빔", 0.65),
            ("붐빔", 0.85),
            ("매우 붐빔", 1.0),
            ("알 수 없음", 0.5),
        ],
    )
    def test_mapping(self, level: str | None, expected: float) -> None:
        assert congestion_index(level) == expected

    def test_mapping_is_total(self) -> None:
        samples = ["", "여유", "보통", "약간", "붐빔", "매우", "여유 보통", "crowded", "매우 여유", "?"]

        for sample in samples:
            assert congestion_index(sample) in {0.15, 0.45, 0.5, 0.65, 0.85, 1.0}


class TestEffectiveRadius:
    """실효 반경 테스트."""

    def test_equals_requested_radius_without_congestion(self) -> None:
        assert effective_radius(1500, 0.0) == 1500

    def test_is_non_increasing_in_congestion(self) -> None:
        indices = [0.0, 0.15, 0.45, 0.5, 0.65, 0.85, 1.0]
        radii = [effective_radius(1500, idx) for idx in indices]

        assert radii == sorted(radii, reverse=True)

    def test_moderate_congestion_scenario(self) -> None:
        assert effective_radius(1500, congestion_index("보통")) == pytest.approx(1263.75)


class TestClassifyBucket:
    """버킷 분류 테스트."""

    @pytest.mark.parametrize(
        "category,name,address,expected",
        [
            ("카페,디저트>카페", "판교 커피랩", "", Bucket.CAFE),
            ("", "Blue Bottle Coffee", "", Bucket.CAFE),
            ("한식>육류,고기요리", "한우집", "", Bucket.FOOD),
            ("술집>전통,민속주점", "막걸리집", "", Bucket.FOOD),
            ("문화,예술>미술관", "현대 미술관", "", Bucket.CULTURE),
            ("여행,명소>공원", "화랑공원", "", Bucket.OUTDOOR),
            ("", "둔치", "서울 영등포구 한강 둔치", Bucket.OUTDOOR),
            ("생활,편의>주차장", "공영주차장", "", Bucket.OTHER),
        ],
    )
    def test_classify(self, category: str, name: str, address: str, expected: Bucket) -> None:
        assert classify_bucket(category, name, address) == expected

    def test_first_matching_bucket_wins(self) -> None:
        assert classify_bucket("카페", "서울숲 공원 카페", "") == Bucket.CAFE


class TestScoreCandidate:
    """점수 계산 테스트."""

    def test_unknown_distance_skips_distance_term(self) -> None:
        result = score_candidate(_ctx(), distance_m=None, bucket=Bucket.OTHER)

        assert result.score == 6
        assert result.why[0] == "거리 계산 불가(좌표 없음)"

    @pytest.mark.parametrize(
        "bucket,expected_score,expected_reason",
        [
            (Bucket.CAFE, 24, "우천: 실내 성향 가산"),
            (Bucket.FOOD, 24, "우천: 실내 성향 가산"),
            (Bucket.CULTURE, 24, "우천: 실내 성향 가산"),
            (Bucket.OUTDOOR, -6, "우천: 야외 성향 감점"),
        ],
    )
    def test_rain_adjustment(self, bucket: Bucket, expected_score: int, expected_reason: str) -> None:
        result = score_candidate(_ctx(is_rainy=True), distance_m=None, bucket=bucket)

        assert result.score == expected_score
        assert expected_reason in result.why

    def test_rain_does_not_touch_other_bucket(self) -> None:
        result = score_candidate(_ctx(is_rainy=True), distance_m=None, bucket=Bucket.OTHER)

        assert result.score == 6

    def test_clear_weather_outdoor_bonus(self) -> None:
        outdoor = score_candidate(_ctx(), distance_m=None, bucket=Bucket.OUTDOOR)
        cafe = score_candidate(_ctx(), distance_m=None, bucket=Bucket.CAFE)

        assert outdoor.score == 20
        assert "맑음: 야외 성향 가산" in outdoor.why
        assert cafe.score == 6

    def test_distance_inside_radius(self) -> None:
        result = score_candidate(_ctx(), distance_m=0, bucket=Bucket.OTHER)

        assert result.score == 66
        assert result.why[0] == "반경 적합(0m)"

    def test_distance_outside_radius_with_congestion(self) -> None:
        ctx = _ctx(congestion_level="보통", congestion_idx=0.5)

        result = score_candidate(ctx, distance_m=2000, bucket=Bucket.OTHER)

        # -60 (거리) - 5 (혼잡도 근접 보정) + 6 (기본)
        assert result.score == -59
        assert result.why[0] == "반경 외(>1000m)"
        assert "혼잡도(보통) 반영" in result.why

    def test_distance_scale_has_floor_of_300m(self) -> None:
        result = score_candidate(_ctx(effective_radius_m=200), distance_m=100, bucket=Bucket.OTHER)

        # (1 - 100/300) * 60 = 40
        assert result.score == 46

    def test_congestion_rewards_proximity_more_when_crowded(self) -> None:
        calm = score_candidate(_ctx(congestion_idx=0.15), distance_m=100, bucket=Bucket.OTHER)
        crowded = score_candidate(_ctx(congestion_idx=1.0), distance_m=100, bucket=Bucket.OTHER)

        assert crowded.score > calm.score

    def test_baseline_rationale_is_last(self) -> None:
        result = score_candidate(_ctx(), distance_m=10, bucket=Bucket.CAFE)

        assert result.why[-1] == "리뷰 기반 정렬 후보(sort=comment)"


def test_round_half_up() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.5) == 0
    assert round_half_up(-1.6) == -2
