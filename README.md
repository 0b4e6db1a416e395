# guandan

Game logic for GuanDan (掼蛋), the four-player partnership climbing game
played with two full decks and four jokers. The package gives you the
rules: cards, recognition of plays with wild cards, level progression,
tribute handling and a controller that drives a game turn by turn and
reports what happens as events. It uses only the standard library.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install .[test]
```

## Modules

- `guandan.cards`: `CardSuit`, `CardPoint` and `Card`. Cards compare equal
  on point and suit only. `Card.comparison_value()` ranks a card under the
  level of its owner's team: big joker 16, little joker 15, level rank 14,
  then A down to 2. Without an owner or team the level is taken as 2.
  `Card.is_wild()` is true for the heart of the level rank.
  `Card.image_filename()` returns a name such as `Spades_ACE`.
- `guandan.team`: `Team`, with an `id`, its `players` and its
  `current_level_rank`.
- `guandan.deck`: `CardDeck`, the 108 cards of two decks, shuffled on
  creation. It takes an optional `random.Random` for repeatable shuffles.
- `guandan.levels`: `LevelStatus`, `card_point_to_level` and
  `level_to_card_point`. After a round the winners go up three levels if
  the winner's partner came second, two if third and one if last. Passing
  the ace ends the game. A team that loses three times while at the ace
  drops back to 2.
- `guandan.combos`: `ComboType`, `ComboInfo`, `evaluate_concrete_combo`,
  `check_consecutive`, `sequential_order` and `combo_fingerprint`. They
  recognise singles, pairs, triples, a triple with a pair, five-card
  straights, three consecutive pairs and two consecutive triples. They also
  recognise bombs of four or more of a kind, straight flushes (counted as
  bombs) and the four-joker bomb. An ace may run low (A-2-3-4-5) or high
  (10-J-Q-K-A).
- `guandan.plays`: `can_beat` and `all_possible_valid_plays`. The second
  tries each wild card as every card from 2 to A in all four suits. It keeps
  the distinct plays that beat the table and lists them bombs first, then by
  falling level, then by fewer wild cards.
- `guandan.player`: `PlayerType` and `Player`, which holds a sorted hand.
  `Player.can_play_cards()` tells whether the cards can beat a table combo.
- `guandan.tributes`: `Tribute`, `plan_tributes`, `can_resist_tribute`,
  `is_valid_tribute_card` and `choose_return_card`. These decide who pays
  whom after a round, when the losers' big jokers let them refuse, and
  which card must be paid. The card paid is the strongest card in the hand,
  leaving out the heart of the level. The card returned is the first card
  of ten or lower to a partner, or the weakest card to an opponent.
- `guandan.controller`: `GameController`, `GamePhase`, `GameEvent` and
  `GameError`.

## Example

```python
from guandan.cards import Card, CardPoint, CardSuit
from guandan.combos import evaluate_concrete_combo
from guandan.player import Player
from guandan.team import Team

team = Team(0)
player = Player("North", 0, team)
team.add_player(player)

hand = [Card(point, CardSuit.SPADE) for point in (
    CardPoint.SIX, CardPoint.SEVEN, CardPoint.EIGHT,
    CardPoint.NINE, CardPoint.TEN)]
combo = evaluate_concrete_combo(hand, player)
print(combo.description())   # 同花顺 (等级: 205009): 6S 7S 8S 9S 10S
```

## Running a game

Create four `Player`s and two `Team`s of two, with each player's `team`
set. Pass them to `GameController.setup_new_game(players, teams)`. Register
a listener with `subscribe(listener)`, then call `start_game()`.
`GameController` takes an optional `random.Random` for dealing, choosing the
first player and picking hints.

After that, act for whichever player's turn it is:

- `play(player_id, cards)` returns the `ComboInfo` played.
- `pass_turn(player_id)` declines to beat the table.
- `request_hint(player_id)` returns a random legal play, or `None`.
- `select_tribute_card(player_id, card)` pays a tribute while the phase is
  `GamePhase.TRIBUTE_INPUT`. Return tributes are chosen automatically.

A move that the rules or the current phase do not allow raises `GameError`.
The error carries the `player_id` and is also reported as a
`player_message` event. Each listener receives `GameEvent(name, data)`
objects named `game_started`, `new_round_started`, `cards_dealt`,
`current_turn`, `controls_enabled`, `player_hand_updated`, `table_updated`,
`table_cleared`, `broadcast`, `player_message`, `ask_for_tribute`,
`tribute_phase_ended`, `round_over` and `game_over`.
`active_player_ids()`, `player_by_id()` and `round_summary()` give the
current state. Messages and descriptions are in Chinese.

## What the package does not do

There is no user interface and no command to run. There are no card
pictures: `image_filename()` only gives a name. There are no computer
opponents, and games are not saved. Every move has to be made by calling
the controller.

## Running the tests

```
pytest
```