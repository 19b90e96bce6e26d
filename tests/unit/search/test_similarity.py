import pytest

from ruido.domain.search.similarity import lexemes, match_rank, trigram_similarity, trigrams


@pytest.mark.unit
def test_trigrams_use_word_padding():
    assert trigrams("Kick") == {"  k", " ki", "kic", "ick", "ck "}
    assert trigrams("") == set()
    assert trigrams(None) == set()


@pytest.mark.unit
def test_trigram_similarity_matches_pg_trgm():
    assert trigram_similarity("word", "two words") == pytest.approx(4 / 11)
    assert trigram_similarity("kick", "KICK") == 1.0
    assert trigram_similarity("kick", "") == 0.0
    assert trigram_similarity(None, "kick") == 0.0


@pytest.mark.unit
def test_typo_stays_above_default_threshold():
    assert trigram_similarity("Gravity Well Bass", "gravty") > 0.2
    assert trigram_similarity("Neon Skyline Kick", "gravty") < 0.2


@pytest.mark.unit
def test_english_lexemes_drop_stopwords_and_stem():
    assert lexemes("The kicks and the drums", "english") == ["kick", "drum"]
    assert lexemes("The kicks and the drums", "simple") == ["the", "kicks", "and", "the", "drums"]
    assert lexemes("sci-fi", "simple") == ["sci", "fi"]


@pytest.mark.unit
def test_match_rank_requires_every_term():
    document = "Neon Skyline Kick punchy kick sample"
    assert match_rank(document, "kick") > 0
    assert match_rank(document, "neon kick") > 0
    assert match_rank(document, "neon bass") == 0.0
    assert match_rank(document, "the") == 0.0
    assert match_rank(None, "kick") == 0.0


@pytest.mark.unit
def test_match_rank_prefers_denser_documents():
    assert match_rank("kick kick kick", "kick") > match_rank("kick with a long dusty tail", "kick")
