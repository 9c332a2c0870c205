"""Tests for NOC / ISO2 code inference and the CodeMapping tables."""

import json

import pytest

from noc_codes import (
    FLAG_BASE_URL, CodeMapping, add_name_alias, canonical_name, flag_url,
    guess_iso2, name_aliases, normalize_name,
)


class TestNames:
    def test_normalize_collapses_whitespace(self):
        assert normalize_name('  United\xa0 States\n') == 'United States'
        assert normalize_name(None) == ''

    def test_canonical_name(self):
        assert canonical_name(' Italy* ') == 'Italy'
        assert canonical_name('The Bahamas') == 'Bahamas'
        assert canonical_name('the Gambia') == 'Gambia'

    def test_aliases_most_specific_first(self):
        assert name_aliases('Italy*') == ('Italy*', 'Italy')
        assert name_aliases('The Bahamas') == ('The Bahamas', 'Bahamas')
        assert name_aliases('Norway') == ('Norway',)
        assert name_aliases('  ') == ()

    def test_aliases_are_chained(self):
        assert name_aliases('The Bahamas*') == ('The Bahamas*', 'The Bahamas', 'Bahamas')

    def test_add_name_alias(self):
        table = {}
        add_name_alias(table, 'The Bahamas*', 'BAH')
        assert table == {'The Bahamas*': 'BAH', 'The Bahamas': 'BAH', 'Bahamas': 'BAH'}


class TestGuessIso2:
    def test_neutral_team_is_none(self):
        assert guess_iso2('AIN', 'Individual Neutral Athletes') is None

    def test_neutral_beats_name_heuristic(self):
        assert guess_iso2('AIN', 'United States') is None
        assert guess_iso2('EOR', 'Germany', {'EOR': 'de'}) is None

    def test_override_beats_loaded_table(self):
        assert guess_iso2('GER', 'Germany', {'GER': 'xx'}) == 'de'

    def test_override_known_absent(self):
        assert guess_iso2('AHO', 'Netherlands') is None

    def test_loaded_table(self):
        assert guess_iso2('NOR', 'Norway', {'NOR': 'no'}) == 'no'

    def test_two_letter_code(self):
        assert guess_iso2('FR') == 'fr'

    def test_name_heuristic(self):
        assert guess_iso2('XYZ', 'South Korea') == 'kr'
        assert guess_iso2(None, 'The Netherlands') == 'nl'

    def test_unresolved(self):
        assert guess_iso2('XYZ', 'Atlantis') is None
        assert guess_iso2(None, None) is None

    def test_idempotent(self):
        first = guess_iso2('TPE', 'Chinese Taipei')
        assert guess_iso2('TPE', 'Chinese Taipei') == first == 'tw'


class TestFlagUrl:
    def test_url(self):
        assert flag_url('NO') == f'{FLAG_BASE_URL}no.png'

    def test_none(self):
        assert flag_url(None) is None
        assert flag_url('') is None


class TestCodeMapping:
    def test_builtin_lookup_with_aliases(self):
        mapping = CodeMapping.builtin()
        assert mapping.noc_for_name('Italy') == 'ITA'
        assert mapping.noc_for_name(' Italy* ') == 'ITA'
        assert mapping.noc_for_name('Atlantis') is None

    def test_read_only(self):
        mapping = CodeMapping.builtin()
        with pytest.raises(TypeError):
            mapping.name_to_noc['Atlantis'] = 'ATL'
        with pytest.raises(AttributeError):
            mapping.noc_to_iso2 = {}

    def test_does_not_share_input_dict(self):
        source = {'Italy': 'ITA'}
        mapping = CodeMapping(source, {})
        source['Italy'] = 'XXX'
        assert mapping.noc_for_name('Italy') == 'ITA'

    def test_flag_for(self):
        mapping = CodeMapping.builtin()
        assert mapping.flag_for('SUI') == f'{FLAG_BASE_URL}ch.png'
        assert mapping.flag_for('AIN', 'United States') is None

    def test_load_missing_dir_uses_builtin(self, tmp_path):
        mapping = CodeMapping.load(str(tmp_path / 'nope'))
        assert mapping.noc_for_name('Norway') == 'NOR'

    def test_load_overlays_files(self, tmp_path):
        (tmp_path / 'name_to_noc.json').write_text(
            json.dumps({'Bahamas': 'BAH', 'Norway': 'NOR'}), encoding='utf-8')
        (tmp_path / 'noc_to_iso2.json').write_text(
            json.dumps({'BAH': 'bs'}), encoding='utf-8')
        mapping = CodeMapping.load(str(tmp_path))
        assert mapping.noc_for_name('The Bahamas') == 'BAH'
        assert mapping.iso2_for('BAH') == 'bs'
        assert mapping.noc_for_name('Canada') == 'CAN'

    def test_load_rejects_non_object(self, tmp_path):
        (tmp_path / 'name_to_noc.json').write_text('["Italy"]', encoding='utf-8')
        with pytest.raises(ValueError):
            CodeMapping.load(str(tmp_path))

    def test_load_directory_in_place_of_file(self, tmp_path):
        (tmp_path / 'name_to_noc.json').mkdir()
        mapping = CodeMapping.load(str(tmp_path))
        assert mapping.noc_for_name('Norway') == 'NOR'

    def test_load_invalid_json_uses_builtin(self, tmp_path, capsys):
        (tmp_path / 'name_to_noc.json').write_text('{not json', encoding='utf-8')
        (tmp_path / 'noc_to_iso2.json').write_bytes(b'\xff\xfe{}')
        mapping = CodeMapping.load(str(tmp_path))
        assert mapping.noc_for_name('Canada') == 'CAN'
        assert mapping.iso2_for('NOR') == 'no'
        assert capsys.readouterr().out.count('unreadable') == 2

    def test_save_then_load(self, tmp_path):
        out = tmp_path / 'data'
        CodeMapping({'Bahamas': 'BAH'}, {'BAH': 'bs'}).save(str(out))
        saved = json.loads((out / 'noc_to_iso2.json').read_text(encoding='utf-8'))
        assert saved == {'BAH': 'bs'}
        assert CodeMapping.load(str(out)).iso2_for('BAH') == 'bs'
