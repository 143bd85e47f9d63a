import argparse
import logging
import sys

import pygame

from config import load_config
from game import Direction
from grid import Position
from session import GameMode, GameSession, SessionCallbacks
from storage import DEFAULT_STORAGE_FILE, JsonFileStorage


COLORS = {
    'background': (248, 250, 252),
    'grid_background': (165, 174, 185),
    'empty_cell': (203, 213, 225),
    'text_dark': (51, 65, 85),
    'text_light': (255, 255, 255),
    'warning': (200, 0, 0),
    'overlay': (15, 23, 42, 180),
    'power_up_ready': (34, 197, 94),
    'power_up_waiting': (148, 163, 184),
    # tile colors
    2: (219, 234, 254),
    4: (191, 219, 254),
    8: (147, 197, 253),
    16: (96, 165, 250),
    32: (59, 130, 246),
    64: (37, 99, 235),
    128: (29, 78, 216),
    256: (30, 64, 175),
    512: (30, 58, 138),
    1024: (23, 37, 84),
    2048: (15, 23, 42),
}

KEY_DIRECTIONS = {
    pygame.K_UP: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_w: Direction.UP,
    pygame.K_s: Direction.DOWN,
    pygame.K_a: Direction.LEFT,
    pygame.K_d: Direction.RIGHT,
}

KEY_POWER_UPS = {
    pygame.K_1: 'undo',
    pygame.K_2: 'shuffle',
    pygame.K_3: 'remove',
    pygame.K_4: 'bomb',
}

MODE_CYCLE = [GameMode.CLASSIC, GameMode.TIME_ATTACK, GameMode.ZEN]


class GameGUI:
    def __init__(self, mode=GameMode.CLASSIC, config=None, storage=None):
        """initialize game GUI"""
        pygame.init()

        callbacks = SessionCallbacks(
            on_win=lambda: print("You reached 2048! Press K to keep playing"),
            on_game_over=lambda: print(f"Game over! Final score: {self.session.state.score}"),
            on_power_up=lambda power_up_id: print(f"Used {power_up_id}"),
        )
        self.session = GameSession(mode, config=config, storage=storage, callbacks=callbacks)
        self.size = self.session.config.grid_size

        # GUI settings
        self.cell_size = 100
        self.cell_margin = 10
        self.header_height = 150
        self.footer_height = 60

        # window size
        grid_size = self.size * self.cell_size + (self.size + 1) * self.cell_margin
        self.window_width = grid_size
        self.window_height = grid_size + self.header_height + self.footer_height

        # create window
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption("2048 Neon")

        # fonts
        self.font_large = pygame.font.Font(None, 48)
        self.font_medium = pygame.font.Font(None, 36)
        self.font_small = pygame.font.Font(None, 24)

        # game clock
        self.clock = pygame.time.Clock()

    def get_tile_color(self, value):
        """get background color for a tile value"""
        if value in COLORS:
            return COLORS[value]
        elif value > 2048:
            return COLORS[2048]  # 2048 color for higher values
        else:
            return COLORS['empty_cell']

    def get_text_color(self, value):
        """get text color for a tile value"""
        if value <= 4:
            return COLORS['text_dark']
        else:
            return COLORS['text_light']

    def draw_board(self):
        """draw the game board"""
        self.screen.fill(COLORS['background'])

        self.draw_header()

        grid_y = self.header_height
        grid_rect = pygame.Rect(0, grid_y, self.window_width, self.window_width)
        pygame.draw.rect(self.screen, COLORS['grid_background'], grid_rect)

        for row in range(self.size):
            for col in range(self.size):
                self.draw_cell(row, col)

        self.draw_power_ups()
        self.draw_overlay()

    def draw_header(self):
        """draw score, mode info and instructions"""
        state = self.session.state

        score_text = self.font_large.render(f"Score: {state.score}", True, COLORS['text_dark'])
        self.screen.blit(score_text, (20, 15))

        best_text = self.font_small.render(f"Best: {state.best_score}", True, COLORS['text_dark'])
        self.screen.blit(best_text, (self.window_width - best_text.get_width() - 20, 20))

        info = f"{state.game_mode.value} | Moves: {state.move_count} | Combo: {state.combo_count}"
        if state.time_remaining is not None:
            info += f" | Time: {state.time_remaining:.1f}s"
        info_surface = self.font_small.render(info, True, COLORS['text_dark'])
        self.screen.blit(info_surface, (20, 60))

        if state.game_over:
            instruction_text = "Game Over! Press R to restart"
            color = COLORS['warning']
        else:
            instruction_text = "Arrows/WASD move, 1-4 power-ups"
            color = COLORS['text_dark']
        instruction_surface = self.font_small.render(instruction_text, True, color)
        self.screen.blit(instruction_surface, (20, 90))

        restart_text = self.font_small.render("R restart, M mode, ESC quit", True, COLORS['text_dark'])
        self.screen.blit(restart_text, (20, 115))

    def draw_cell(self, row, col):
        """draw a single cell of the grid"""
        tile = self.session.state.grid.cell(Position(col, row))
        value = tile.value if tile else 0

        x = col * (self.cell_size + self.cell_margin) + self.cell_margin
        y = row * (self.cell_size + self.cell_margin) + self.cell_margin + self.header_height

        cell_rect = pygame.Rect(x, y, self.cell_size, self.cell_size)
        pygame.draw.rect(self.screen, self.get_tile_color(value), cell_rect, border_radius=8)

        if value != 0:
            text_color = self.get_text_color(value)

            # choose font size based on number of digits
            if value < 100:
                font = self.font_large
            elif value < 1000:
                font = self.font_medium
            else:
                font = self.font_small

            text_surface = font.render(str(value), True, text_color)
            text_rect = text_surface.get_rect()
            text_rect.center = (x + self.cell_size // 2, y + self.cell_size // 2)
            self.screen.blit(text_surface, text_rect)

    def draw_power_ups(self):
        """power-up bar below the grid"""
        y = self.window_height - self.footer_height + 20
        x = 20
        for index, power_up in enumerate(self.session.power_ups.values(), start=1):
            if power_up.ready:
                label = f"{index}:{power_up.name} x{power_up.uses}"
                color = COLORS['power_up_ready']
            else:
                label = f"{index}:{power_up.name} ({power_up.current_cooldown})"
                color = COLORS['power_up_waiting']
            surface = self.font_small.render(label, True, color)
            self.screen.blit(surface, (x, y))
            x += surface.get_width() + 15

    def draw_overlay(self):
        """win or game over message on top of the grid"""
        state = self.session.state
        if state.awaiting_keep_playing:
            message = "You win! K to keep playing"
        elif state.game_over and state.game_mode is not GameMode.ZEN:
            message = "Game Over!"
        else:
            return

        overlay = pygame.Surface((self.window_width, self.window_width), pygame.SRCALPHA)
        overlay.fill(COLORS['overlay'])
        self.screen.blit(overlay, (0, self.header_height))

        text_surface = self.font_medium.render(message, True, COLORS['text_light'])
        text_rect = text_surface.get_rect()
        text_rect.center = (self.window_width // 2, self.header_height + self.window_width // 2)
        self.screen.blit(text_surface, text_rect)

    def next_mode(self):
        current = MODE_CYCLE.index(self.session.state.game_mode)
        return MODE_CYCLE[(current + 1) % len(MODE_CYCLE)]

    def handle_keypress(self, key):
        """keyboard input"""
        if key == pygame.K_ESCAPE:
            return False  # quit

        elif key == pygame.K_r:
            self.session.new_game()
            print("Game restarted!")

        elif key == pygame.K_m:
            mode = self.next_mode()
            self.session.new_game(mode)
            print(f"Switched to {mode.value} mode")

        elif key == pygame.K_k:
            self.session.keep_playing()

        elif key in KEY_DIRECTIONS:
            self.session.move(KEY_DIRECTIONS[key])

        elif key in KEY_POWER_UPS:
            self.session.use_power_up(KEY_POWER_UPS[key])

        return True  # continue

    def run(self):
        """main loop"""
        print("2048 Game Started!")
        print("Use arrow keys or WASD to move tiles, 1-4 for power-ups")
        print("Press R to restart, M to change mode, ESC to quit")
        print()

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = self.handle_keypress(event.key)

            # combo decay and the time attack countdown
            self.session.update()

            self.draw_board()
            pygame.display.flip()

            # frame rate
            self.clock.tick(60)

        self.session.close()
        pygame.quit()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="2048 with combos, power-ups and game modes")
    parser.add_argument('--mode', default='classic', choices=[mode.value for mode in GameMode],
                        help='game mode (default: classic)')
    parser.add_argument('--config', default=None, help='JSON file overriding game rules')
    parser.add_argument('--save-file', default=str(DEFAULT_STORAGE_FILE),
                        help='where best score and stats are kept')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        game = GameGUI(
            mode=GameMode.parse(args.mode),
            config=load_config(args.config),
            storage=JsonFileStorage(args.save_file),
        )
        game.run()
    except pygame.error as e:
        print(f"Error running game: {e}")
        pygame.quit()
        sys.exit(1)


if __name__ == "__main__":
    main()
